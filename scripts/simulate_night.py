"""Simulate a movie night with fake participants and random rankings.

Generates users and movie titles with faker (fixed seed by default), has
each user submit movies and rank a random subset of them, then tallies the
night with every registered tally system and prints the results.

Usage:
    python scripts/simulate_night.py
    python scripts/simulate_night.py --users 8 --seed 7 -o night.json
"""

import argparse
import json
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from movienight.config import MAX_SUBMISSIONS
from movienight.ledger import SubmissionLedger
from movienight.models import User
from movienight.ranking import submit_ranking
from movienight.storage.memory import MemoryStore
from movienight.voting import get_all_tally_systems
from movienight.voting import irv  # noqa: F401
from movienight.voting import legacy  # noqa: F401
from movienight.voting.base import group_by_candidate

SEED = 20250105
NIGHT_ID = 1


def make_users(count: int, fake: Faker) -> list[User]:
    return [
        User(user_id=i, name=fake.name(), email=fake.email())
        for i in range(1, count + 1)
    ]


def populate(store: MemoryStore, users: list[User], fake: Faker, rng: random.Random,
             per_user: int) -> None:
    """Submit movies for every user, then rank a random subset for each."""
    ledger = SubmissionLedger(store)
    now = datetime.now(timezone.utc)
    for user in users:
        for _ in range(per_user):
            title = fake.catch_phrase()
            ledger.submit(NIGHT_ID, user.user_id, f"fake-{fake.uuid4()}", now, title=title)

    candidate_ids = [c.candidate_id for c in store.list_candidates(NIGHT_ID)]
    for user in users:
        how_many = rng.randint(1, len(candidate_ids))
        ordering = rng.sample(candidate_ids, how_many)
        submit_ranking(store, user.user_id, NIGHT_ID, ordering)


def main():
    parser = argparse.ArgumentParser(
        description="Simulate a movie night and tally it")
    parser.add_argument("--users", type=int, default=5,
                        help="Number of participants (default: 5)")
    parser.add_argument("--per-user", type=int, default=MAX_SUBMISSIONS,
                        help=f"Movies each user submits (default: {MAX_SUBMISSIONS})")
    parser.add_argument("--seed", type=int, default=SEED,
                        help=f"Random seed (default: {SEED})")
    parser.add_argument("-o", "--output",
                        help="Write the results as JSON to this path")
    args = parser.parse_args()

    fake = Faker("en_US")
    Faker.seed(args.seed)
    rng = random.Random(args.seed)

    store = MemoryStore()
    users = make_users(args.users, fake)
    populate(store, users, fake, rng, min(args.per_user, MAX_SUBMISSIONS))

    candidates = store.list_candidates(NIGHT_ID)
    names = {u.user_id: u.name for u in users}
    print(f"{len(users)} users submitted {len(candidates)} movies:")
    for c in candidates:
        print(f"  [{c.candidate_id}] {c.label} (from {names[c.user_id]})")

    ballots = group_by_candidate(
        store.list_ballots(candidate_ids=[c.candidate_id for c in candidates])
    )
    results = []
    for system in get_all_tally_systems():
        result = system.calculate(candidates, ballots)
        winner = result.winner.label if result.winner else "no winner"
        print(f"{system.name}: {winner} after {len(result.rounds)} round(s)")
        results.append({
            "system_name": result.system_name,
            "winner": result.winner.to_dict() if result.winner else None,
            "details": result.details,
        })

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(results, indent=2), encoding="utf-8")
        print(f"Written to {output_path}")


if __name__ == "__main__":
    main()
