"""Example pipeline: the midline of a triangle is parallel to its base, proved both ways."""

import logging

from geoprover import build_protocol, prove

ENTRIES = [
    ("A", "free_point", {}),
    ("B", "free_point", {}),
    ("C", "free_point", {}),
    ("M", "midpoint", {"a": "A", "b": "B"}),
    ("N", "midpoint", {"a": "A", "b": "C"}),
]

# MN is parallel to BC
STATEMENT = ("parallel_lines", {"A": "M", "B": "N", "C": "B", "D": "C"})


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    protocol, diagnostics = build_protocol(ENTRIES, STATEMENT)
    if diagnostics:
        raise SystemExit("\n".join(str(exc) for exc in diagnostics))

    print("Protocol:")
    for step in protocol:
        print(f"  [{step.index}] {step.describe()}")
    print(f"  Statement: {protocol.statement.describe()}")

    for method in ("wu", "area"):
        result = prove(protocol, method)
        print()
        print(result.summary())

    print("\nCoordinates:")
    for point in protocol.points():
        print(f"  {point.label}: ({point.x}, {point.y}) {point.state.value}")


if __name__ == "__main__":
    main()
