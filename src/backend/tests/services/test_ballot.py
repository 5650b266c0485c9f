"""
Tests for departmental filtering and ballot validation.
"""

import pytest

from core.exceptions import IncompleteBallotError
from models.cosmos_documents import CandidateDocument, ElectionConfigDocument, PositionDocument
from schemas.election import BallotChoice
from services.ballot import (
    build_ballot,
    department_notice,
    filter_candidates,
    is_department_restricted,
    validate_ballot,
)

POSITIONS = [
    PositionDocument(id="pos-secretary", name="Secretary"),
    PositionDocument(id="pos-president", name="President"),
]

CANDIDATES = [
    CandidateDocument(id="cand-bob", name="Bob", department="BCA-2", position_id="pos-president"),
    CandidateDocument(id="cand-alice", name="Alice", department="BCA-1", position_id="pos-president"),
    CandidateDocument(id="cand-cara", name="Cara", department="BCA-1", position_id="pos-secretary"),
]


def _config(departmental: bool, cross: bool) -> ElectionConfigDocument:
    return ElectionConfigDocument(enable_departmental_voting=departmental, allow_cross_department_voting=cross)


@pytest.mark.unit
class TestFilterCandidates:
    def test_restricted_mode_keeps_own_department(self) -> None:
        result = filter_candidates(CANDIDATES, "BCA-1", _config(True, False))
        assert {c.id for c in result} == {"cand-alice", "cand-cara"}

    @pytest.mark.parametrize("departmental,cross", [(False, False), (False, True), (True, True)])
    def test_unrestricted_modes_keep_everyone(self, departmental: bool, cross: bool) -> None:
        assert len(filter_candidates(CANDIDATES, "BCA-1", _config(departmental, cross))) == 3
        assert not is_department_restricted(_config(departmental, cross))

    def test_no_config_keeps_everyone(self) -> None:
        assert len(filter_candidates(CANDIDATES, "BCA-1", None)) == 3


@pytest.mark.unit
class TestDepartmentNotice:
    def test_no_notice_when_departmental_voting_off(self) -> None:
        assert department_notice("BCA-1", _config(False, False)) is None
        assert department_notice("BCA-1", None) is None

    def test_restricted_notice_names_department(self) -> None:
        notice = department_notice("BCA-1", _config(True, False))
        assert notice.restricted_mode is True
        assert "BCA-1" in notice.message

    def test_cross_department_notice(self) -> None:
        notice = department_notice("BCA-1", _config(True, True))
        assert notice.restricted_mode is False
        assert notice.message == "You can vote for candidates from all departments"


@pytest.mark.unit
class TestBuildBallot:
    def test_positions_and_candidates_sorted_by_name(self) -> None:
        ballot = build_ballot(POSITIONS, CANDIDATES)

        assert [p.name for p in ballot] == ["President", "Secretary"]
        assert [c.name for c in ballot[0].candidates] == ["Alice", "Bob"]
        assert [c.name for c in ballot[1].candidates] == ["Cara"]

    def test_position_without_candidates_is_listed(self) -> None:
        ballot = build_ballot(POSITIONS, [])
        assert all(p.candidates == [] for p in ballot)


@pytest.mark.unit
class TestValidateBallot:
    def test_complete_ballot_passes(self) -> None:
        validate_ballot(
            POSITIONS,
            CANDIDATES,
            [
                BallotChoice(position_id="pos-president", candidate_id="cand-bob"),
                BallotChoice(position_id="pos-secretary", candidate_id="cand-cara"),
            ],
        )

    def test_missing_position_fails(self) -> None:
        with pytest.raises(IncompleteBallotError) as exc:
            validate_ballot(POSITIONS, CANDIDATES, [BallotChoice(position_id="pos-president", candidate_id="cand-bob")])
        assert exc.value.message == "Please select a candidate for all positions before submitting."

    def test_candidate_from_other_position_fails(self) -> None:
        with pytest.raises(IncompleteBallotError):
            validate_ballot(
                POSITIONS,
                CANDIDATES,
                [
                    BallotChoice(position_id="pos-president", candidate_id="cand-cara"),
                    BallotChoice(position_id="pos-secretary", candidate_id="cand-cara"),
                ],
            )

    def test_filtered_out_candidate_fails(self) -> None:
        allowed = filter_candidates(CANDIDATES, "BCA-1", _config(True, False))
        with pytest.raises(IncompleteBallotError):
            validate_ballot(
                POSITIONS,
                allowed,
                [
                    BallotChoice(position_id="pos-president", candidate_id="cand-bob"),
                    BallotChoice(position_id="pos-secretary", candidate_id="cand-cara"),
                ],
            )

    def test_unknown_position_fails(self) -> None:
        with pytest.raises(IncompleteBallotError):
            validate_ballot(POSITIONS, CANDIDATES, [BallotChoice(position_id="pos-ghost", candidate_id="cand-bob")])
