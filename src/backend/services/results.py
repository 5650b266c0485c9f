"""
Result tallying and turnout statistics.
"""

from collections import Counter

from models.cosmos_documents import CandidateDocument, PositionDocument, StudentDocument, VoteDocument
from schemas.results import CandidateResult, ElectionStats, PositionResult


def _percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def tally_results(
    positions: list[PositionDocument],
    candidates: list[CandidateDocument],
    votes: list[VoteDocument],
) -> list[PositionResult]:
    """
    Count votes per candidate for every position.

    Votes whose candidate no longer exists still count toward the position
    total but are not attributed to anyone.
    """
    votes_per_position = Counter(v.position_id for v in votes)
    votes_per_candidate = Counter((v.position_id, v.candidate_id) for v in votes)

    results: list[PositionResult] = []
    for position in sorted(positions, key=lambda p: p.name):
        total = votes_per_position.get(position.id, 0)
        rows = [
            CandidateResult(
                candidate_id=candidate.id,
                candidate_name=candidate.name,
                candidate_department=candidate.department,
                votes=votes_per_candidate.get((position.id, candidate.id), 0),
                percentage=_percentage(votes_per_candidate.get((position.id, candidate.id), 0), total),
            )
            for candidate in candidates
            if candidate.position_id == position.id
        ]
        rows.sort(key=lambda r: r.votes, reverse=True)
        results.append(
            PositionResult(
                position_id=position.id,
                position=position.name,
                total_votes=total,
                candidates=rows,
            )
        )
    return results


def election_stats(students: list[StudentDocument], total_votes: int) -> ElectionStats:
    """Turnout across all students."""
    voted = sum(1 for s in students if s.has_voted)
    return ElectionStats(
        total_students=len(students),
        voted_students=voted,
        total_votes=total_votes,
        voting_percentage=_percentage(voted, len(students)),
    )
