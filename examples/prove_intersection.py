"""Example pipeline: a theorem that only holds under a non-degeneracy condition.

The diagonals of a parallelogram bisect each other, provided they are not
parallel.
"""

from geoprover import ProverConfig, prove_entries

ENTRIES = [
    ("A", "free_point", {}),
    ("B", "free_point", {}),
    ("C", "free_point", {}),
    ("D", "translated_point", {"point": "C", "a": "B", "b": "A"}),
    ("ac", "line_through_two_points", {"a": "A", "b": "C"}),
    ("bd", "line_through_two_points", {"a": "B", "b": "D"}),
    ("O", "intersection_point", {"first": "ac", "second": "bd"}),
]

# OA = OC
STATEMENT = ("congruent_segments", {"A": "O", "B": "A", "C": "O", "D": "C"})


def main() -> None:
    config = ProverConfig(max_terms=5000)
    for method in ("wu", "area"):
        result = prove_entries(ENTRIES, STATEMENT, method=method, config=config)
        print(result.summary())
        for condition in result.ndg_conditions:
            print(f"  NDG polynomial: {condition.polynomial}")
        print()


if __name__ == "__main__":
    main()
