"""Parsing of denomination counts typed on the command line."""


def parse_denominations(counts_str: str) -> dict[str, int]:
    """Parse "1000=5,500=2,coins=7" into a count mapping.

    An empty string means nothing was counted. Repeated face values are
    summed. Validation of the counts themselves (sign, known face values)
    is left to the domain layer.

    Raises:
        ValueError: If an entry is not ``label=count`` with a whole-number count
    """
    counts: dict[str, int] = {}
    if not counts_str or not counts_str.strip():
        return counts

    for entry in counts_str.split(","):
        entry = entry.strip()
        if not entry:
            continue
        label, sep, count_str = entry.partition("=")
        label = label.strip().lower()
        if not sep or not label:
            raise ValueError(f"Expected LABEL=COUNT, got '{entry}'")
        try:
            count = int(count_str.strip())
        except ValueError:
            raise ValueError(f"Count for '{label}' must be a whole number, got '{count_str.strip()}'")
        counts[label] = counts.get(label, 0) + count
    return counts


def format_denominations(counts: dict[str, int]) -> str:
    """Render a count mapping back into the "1000=5,500=2" form."""
    return ",".join(f"{label}={count}" for label, count in counts.items())
