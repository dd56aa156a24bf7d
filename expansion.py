"""Rule table and bounded-memory L-system expansion.

The generation engine never builds the expanded word.  It keeps one index per
generation level and, on every call, walks down from the axiom to the symbol
those indices select::

    axiom:          A
                   / \\
    n=1:          A   B
                 /|    \\
    n=2:        A B     A
               /| |     |\\
    n=3:      A B A     A B

With 3 generations the cursor holds three indices.  A call returns the full
production of the symbol selected at the deepest level (a chunk of the n=3
word), then the cursor is advanced like an odometer.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from errors import _require


# -------------------------
# Rules
# -------------------------


class RuleTable:
    """Maps a symbol to its one-step production.

    Symbols without a rule rewrite to themselves.
    """

    def __init__(self) -> None:
        self._rules: dict[str, str] = {}

    @classmethod
    def from_mapping(cls, rules: Mapping[str, str]) -> RuleTable:
        table = cls()
        for symbol, production in rules.items():
            table.add_rule(symbol, production)
        return table

    def add_rule(self, symbol: str, production: str) -> None:
        _require(
            len(symbol) == 1, f"rule symbol must be a single character, got {symbol!r}"
        )
        self._rules[symbol] = production

    def lookup(self, symbol: str) -> str:
        return self._rules.get(symbol, symbol)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({self._rules!r})"


# -------------------------
# Generation engine
# -------------------------


class LSystem:
    """Pull-based producer of the last generation, one chunk per call.

    Memory use is one index per generation no matter how long the expanded
    word gets.  The path from the axiom is re-derived on every call.
    """

    def __init__(self, axiom: str, generations: int, rules: RuleTable) -> None:
        _require(
            isinstance(generations, int) and not isinstance(generations, bool),
            "generations must be an integer",
        )
        _require(generations > 0, f"generations must be > 0, got {generations}")
        self.axiom = axiom
        self.generations = generations
        self.rules = rules
        # Length is always == generations
        self._indexes = [0] * generations

    @property
    def cursor(self) -> tuple[int, ...]:
        return tuple(self._indexes)

    @property
    def exhausted(self) -> bool:
        return self._indexes[0] >= len(self.axiom)

    def next_chunk(self) -> str | None:
        """Return the next chunk of the last generation, or None when done."""
        while not self.exhausted:
            sequence = self.axiom
            # lengths[n] is how many symbols generation n offers on this path
            lengths: list[int] = []
            for level, index in enumerate(self._indexes):
                lengths.append(len(sequence))
                sequence = self.rules.lookup(sequence[index])
                if not sequence and level < self.generations - 1:
                    # Empty production: nothing below this symbol.
                    self._advance(lengths, level)
                    break
            else:
                self._advance(lengths, self.generations - 1)
                return sequence
        return None

    def _advance(self, lengths: list[int], level: int) -> None:
        for deeper in range(level + 1, self.generations):
            self._indexes[deeper] = 0
        self._indexes[level] += 1
        for i in range(level, 0, -1):
            if self._indexes[i] < lengths[i]:
                break
            self._indexes[i] = 0
            self._indexes[i - 1] += 1

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        chunk = self.next_chunk()
        if chunk is None:
            raise StopIteration
        return chunk

    def symbols(self) -> Iterator[str]:
        """Yield the last generation one symbol at a time."""
        for chunk in self:
            yield from chunk


def expand(axiom: str, rules: RuleTable, generations: int) -> str:
    """Materialize a generation by plain repeated rewriting.

    Only meant for small systems and for checking `LSystem` output.
    """
    word = axiom
    for _ in range(generations):
        word = "".join(rules.lookup(symbol) for symbol in word)
    return word
