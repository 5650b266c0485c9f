"""
Tests for result tallying and turnout.
"""

import pytest

from models.cosmos_documents import CandidateDocument, PositionDocument, StudentDocument, VoteDocument
from services.results import election_stats, tally_results


def _votes(position_id: str, candidate_id: str, count: int) -> list[VoteDocument]:
    return [
        VoteDocument(position_id=position_id, candidate_id=candidate_id, voter_id=f"S{i}") for i in range(count)
    ]


@pytest.mark.unit
class TestTallyResults:
    def test_counts_percentages_and_order(self) -> None:
        positions = [PositionDocument(id="p1", name="President")]
        candidates = [
            CandidateDocument(id="c1", name="Alice", position_id="p1"),
            CandidateDocument(id="c2", name="Bob", position_id="p1"),
            CandidateDocument(id="c3", name="Cara", position_id="p1"),
        ]
        votes = _votes("p1", "c1", 1) + _votes("p1", "c2", 2)

        [result] = tally_results(positions, candidates, votes)

        assert result.total_votes == 3
        assert [c.candidate_name for c in result.candidates] == ["Bob", "Alice", "Cara"]
        assert [c.votes for c in result.candidates] == [2, 1, 0]
        assert [c.percentage for c in result.candidates] == [66.7, 33.3, 0.0]

    def test_position_without_votes(self) -> None:
        [result] = tally_results(
            [PositionDocument(id="p1", name="President")],
            [CandidateDocument(id="c1", name="Alice", position_id="p1")],
            [],
        )
        assert result.total_votes == 0
        assert result.candidates[0].percentage == 0.0

    def test_positions_sorted_by_name(self) -> None:
        results = tally_results(
            [PositionDocument(id="p2", name="Treasurer"), PositionDocument(id="p1", name="President")],
            [],
            [],
        )
        assert [r.position for r in results] == ["President", "Treasurer"]


@pytest.mark.unit
class TestElectionStats:
    def test_turnout(self) -> None:
        students = [
            StudentDocument(student_id=f"S{i}", name=f"Student {i}", password="x", has_voted=i < 1)
            for i in range(3)
        ]
        stats = election_stats(students, total_votes=4)

        assert stats.total_students == 3
        assert stats.voted_students == 1
        assert stats.total_votes == 4
        assert stats.voting_percentage == 33.3

    def test_no_students(self) -> None:
        assert election_stats([], 0).voting_percentage == 0.0
