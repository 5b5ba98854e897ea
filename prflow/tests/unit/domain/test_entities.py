import pytest

from prflow.domain.entities import (
    Branch,
    FailureKind,
    LocalRepository,
    RemoteRepository,
    RepositoryRef,
    SubmissionFailed,
    ValidationResult,
)


def _repo(owner="octo", name="demo", default="main", parent=None):
    return RemoteRepository(
        owner=owner,
        name=name,
        clone_url=f"https://github.com/{owner}/{name}.git",
        default_branch_name=default,
        is_fork=parent is not None,
        parent=parent,
    )


def test_branch_identity_is_name_and_repository():
    a = Branch("main", RepositoryRef("octo", "demo", "https://github.com/octo/demo.git"))
    b = Branch("main", RepositoryRef("octo", "demo", "git@github.com:octo/demo.git"))
    other_repo = Branch("main", RepositoryRef("upstream", "demo"))
    other_name = Branch("dev", RepositoryRef("octo", "demo"))

    assert a == b
    assert hash(a) == hash(b)
    assert a != other_repo
    assert a != other_name


def test_repository_identity_ignores_case():
    local = RepositoryRef("Octo", "Demo", "https://github.com/Octo/Demo.git")
    remote = RepositoryRef("octo", "demo")

    assert local == remote
    assert hash(local) == hash(remote)
    assert Branch("main", local) == Branch("main", remote)
    assert Branch("Main", local) != Branch("main", remote)
    assert str(local) == "Octo/Demo"


def test_branch_display_name_includes_owner():
    branch = Branch("feature", RepositoryRef("octo", "demo"))
    assert branch.display_name == "octo:feature"
    assert str(branch) == "octo:feature"


@pytest.mark.parametrize("name", ["", "   "])
def test_branch_rejects_blank_names(name):
    with pytest.raises(ValueError):
        Branch(name, RepositoryRef("octo", "demo"))


def test_default_target_branch_for_plain_repository():
    repo = _repo()
    assert repo.default_target_branch() == Branch("main", RepositoryRef("octo", "demo"))


def test_default_target_branch_for_fork_uses_parent_default():
    upstream = _repo("upstream", "demo", default="develop")
    fork = _repo("octo", "demo", parent=upstream)

    target = fork.default_target_branch()

    assert target == Branch("develop", RepositoryRef("upstream", "demo"))
    assert target.repository.clone_url == "https://github.com/upstream/demo.git"


def test_fork_without_parent_record_uses_own_default():
    fork = RemoteRepository(
        owner="octo",
        name="demo",
        clone_url="https://github.com/octo/demo.git",
        default_branch_name="main",
        is_fork=True,
    )
    assert fork.default_target_branch() == fork.default_branch


def test_local_repository_current_branch_ref():
    local = LocalRepository("octo", "demo", "https://github.com/octo/demo.git", "feature")
    assert local.current_branch_ref() == Branch("feature", RepositoryRef("octo", "demo"))

    detached = LocalRepository("octo", "demo", "https://github.com/octo/demo.git", None)
    assert detached.current_branch_ref() is None


def test_validation_result_factories():
    assert ValidationResult.success().is_valid
    unvalidated = ValidationResult.unvalidated()
    assert unvalidated.is_valid and not unvalidated.display_error
    failure = ValidationResult.failure("nope")
    assert not failure.is_valid
    assert failure.display_error
    assert failure.message == "nope"


def test_submission_failed_has_no_pull_request():
    failed = SubmissionFailed(FailureKind.NETWORK, "timeout")
    assert failed.pull_request is None
    assert failed.kind is FailureKind.NETWORK
