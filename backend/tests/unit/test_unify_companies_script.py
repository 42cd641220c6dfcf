"""Tests for the unify_companies command-line script."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from quest.services.company_unification import (
    CompanyRecord,
    DuplicateGroup,
    GroupMember,
    MergeResult,
    UnificationResult,
)
from scripts import unify_companies


def _result(*, applied: bool) -> UnificationResult:
    members = [
        GroupMember(CompanyRecord(id="1", name="Acme Corp"), 1.0),
        GroupMember(CompanyRecord(id="2", name="Acme Inc"), 1.0),
    ]
    merge = MergeResult(
        canonical_id="1",
        canonical_name="Acme Corp",
        members=members,
        recommended="merge",
        applied=applied,
        profiles_repointed=4 if applied else 0,
        companies_deleted=1 if applied else 0,
    )
    return UnificationResult(
        dry_run=not applied,
        groups=[DuplicateGroup(members)],
        merges=[merge],
        groups_merged=1 if applied else 0,
    )


class TestParser:
    """--apply is the only switch; dry run otherwise."""

    def test_defaults_to_dry_run(self):
        assert unify_companies._build_parser().parse_args([]).apply is False

    def test_apply_flag(self):
        assert unify_companies._build_parser().parse_args(["--apply"]).apply is True

    def test_rejects_unknown_arguments(self):
        with pytest.raises(SystemExit):
            unify_companies._build_parser().parse_args(["--force"])


class TestMain:
    """main() runs unification once and reports."""

    def test_dry_run(self, caplog):
        unify = AsyncMock(return_value=_result(applied=False))

        with (
            patch.object(unify_companies, "unify", new=unify),
            caplog.at_level(logging.INFO, logger=unify_companies.__name__),
        ):
            exit_code = unify_companies.main([])

        assert exit_code == 0
        unify.assert_awaited_once_with(apply=False)
        assert "Would merge into 'Acme Corp' <- 'Acme Inc' (1.00)" in caplog.text
        assert "1 duplicates proposed" in caplog.text

    def test_apply(self, caplog):
        unify = AsyncMock(return_value=_result(applied=True))

        with (
            patch.object(unify_companies, "unify", new=unify),
            caplog.at_level(logging.INFO, logger=unify_companies.__name__),
        ):
            exit_code = unify_companies.main(["--apply"])

        assert exit_code == 0
        unify.assert_awaited_once_with(apply=True)
        assert "Merged into 'Acme Corp'" in caplog.text
        assert "1 merged, 1 duplicates resolved" in caplog.text


class TestUnify:
    """unify() owns its engine and disposes it."""

    async def test_disposes_engine_on_failure(self):
        engine = MagicMock()
        engine.dispose = AsyncMock()
        session = MagicMock()
        session.__aenter__ = AsyncMock(return_value=session)
        session.__aexit__ = AsyncMock(return_value=False)
        session.begin.return_value.__aenter__ = AsyncMock()
        session.begin.return_value.__aexit__ = AsyncMock(return_value=False)
        factory = MagicMock(return_value=session)

        with (
            patch.object(
                unify_companies, "create_async_engine", return_value=engine
            ),
            patch.object(unify_companies, "async_sessionmaker", return_value=factory),
            patch.object(
                unify_companies,
                "run_unification",
                new=AsyncMock(side_effect=RuntimeError("boom")),
            ),
            pytest.raises(RuntimeError, match="boom"),
        ):
            await unify_companies.unify(apply=True)

        engine.dispose.assert_awaited_once()
