from ..schemas.records import CandidateProfile


def filter_candidates(
    candidates: list[CandidateProfile],
    *,
    search: str | None = None,
    status: str | None = None,
) -> list[CandidateProfile]:
    """Case-insensitive substring match on name or email, plus an exact status filter ("ALL" = any)."""
    term = (search or "").strip().lower()
    wanted = (status or "ALL").strip().upper()

    def matches(c: CandidateProfile) -> bool:
        if term and term not in c.name.lower() and term not in c.email.lower():
            return False
        return wanted == "ALL" or c.status == wanted

    return [c for c in candidates if matches(c)]
