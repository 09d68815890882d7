"""Sequence repetition penalty.

Penalizes tokens that would continue a sequence already present in the
recent history. With ``min_length=3`` and the history ``1, 2, 3, 4, 1, 2, 3``
the token ``4`` is penalized, since generating it would repeat
``1, 2, 3, 4``.

``tolerance`` lets a match skip mismatching tokens, acting as a wildcard:
with ``tolerance=1`` the history ``1, 8, 3, 4, 1, 2, 3`` still penalizes
``4``. ``max_merge`` is the number of extra history tokens one tolerated
mismatch may absorb: with the default of 1 the history
``1, 7, 8, 3, 4, 1, 2, 3`` matches as well, with ``max_merge=0`` it does
not.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import OptionMetadata, SamplerMetadata
from llm_samplers.configure.value import OptionType
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry
from llm_samplers.samplers.repetition import trailing_window

if TYPE_CHECKING:
    from collections.abc import Sequence

    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


def fuzzy_match(
    hay: Sequence[int],
    needle: Sequence[int],
    min_len: int,
    tolerance: int,
    merge_limit: int,
) -> list[tuple[int, int]]:
    """Match *needle* against the start of *hay*, tolerating mismatches.

    Each exact match allows one step of lookahead for the next needle
    token. Each mismatch spends one unit of *tolerance*, skips the needle
    token and allows ``merge_limit + 1`` steps of lookahead.

    Returns:
        ``(hay_end, needle_len)`` pairs for every matched needle prefix of
        at least *min_len* tokens, where ``hay_end`` is the hay index just
        past the last matched token.
    """
    result: list[tuple[int, int]] = []
    window = 1
    hay_iter = iter(enumerate(hay))

    for nidx, token in enumerate(needle):
        matched = False
        while window > 0:
            window -= 1
            step = next(hay_iter, None)
            if step is None:
                return result
            hidx, hay_token = step
            if hay_token == token:
                if nidx + 1 >= min_len:
                    result.append((hidx + 1, nidx + 1))
                window = 1
                matched = True
                break
        if matched:
            continue
        if tolerance == 0:
            break
        tolerance -= 1
        window = merge_limit + 1
    return result


def find_seqs(seq: Sequence[int], min_len: int, tolerance: int, max_merge: int) -> list[list[int]]:
    """Find earlier occurrences of the trailing sequences of *seq*.

    Every suffix of *seq* at least *min_len* long is used as a needle and
    matched at each earlier position. A match is only kept when a token
    follows it in the history.

    Returns:
        One list per match: the matched history span followed by the token
        that continued it. The last element is the token to penalize and
        the length is the sequence length used for stacking.
    """
    seqlen = len(seq)
    if seqlen < min_len * 2:
        return []

    result: list[list[int]] = []
    for offset in range(seqlen):
        hay = seq[offset:]
        if len(hay) <= min_len:
            break
        nlen = min_len
        needle = seq[seqlen - nlen :]
        while seqlen >= nlen + min_len:
            if hay[0] == needle[0]:
                for hay_end, _mlen in fuzzy_match(hay, needle, len(needle), tolerance, max_merge):
                    if len(hay) > len(needle) and len(hay) > hay_end + 1:
                        result.append(list(hay[: hay_end + 1]))
            nlen += 1
            if nlen >= len(hay):
                break
            needle = seq[seqlen - nlen :]
    return result


@SamplerRegistry.register("seq_repetition")
class SeqRepetitionSampler(ConfigurableSampler, Sampler):
    """Penalize tokens that would continue a sequence seen in the history.

    A continuation token gets ``seqlen * stacking_penalty + flat_penalty``
    subtracted from its logit, using the longest sequence it continues.
    """

    METADATA = SamplerMetadata(
        name="sequence repetition",
        description=(
            "Applies a penalty to tokens based on whether they continue a "
            "sequence that was already seen."
        ),
        options=(
            OptionMetadata(
                "flat_penalty",
                "Flat penalty to apply to the token that would continue the matched sequence.",
                OptionType.FLOAT,
            ),
            OptionMetadata(
                "stacking_penalty",
                "Penalty multiplied by the length of the matched sequence.",
                OptionType.FLOAT,
            ),
            OptionMetadata("min_length", "The minimum length for a sequence to match.", OptionType.UINT),
            OptionMetadata(
                "tolerance",
                "Number of mismatching tokens a match may skip, e.g. with 1, [1, 6, 3] matches [1, 2, 3].",
                OptionType.UINT,
            ),
            OptionMetadata(
                "max_merge",
                "Extra history tokens one tolerated mismatch may absorb; 0 disables merging.",
                OptionType.UINT,
            ),
            OptionMetadata(
                "last_n",
                "Number of previous tokens to consider when looking for repeated sequences.",
                OptionType.UINT,
            ),
        ),
    )

    def __init__(
        self,
        flat_penalty: float = 0.0,
        stacking_penalty: float = 0.0,
        min_length: int = 4,
        tolerance: int = 0,
        max_merge: int = 1,
        last_n: int = 64,
    ) -> None:
        self.flat_penalty = flat_penalty
        self.stacking_penalty = stacking_penalty
        self.min_length = min_length
        self.tolerance = tolerance
        self.max_merge = max_merge
        self.last_n = last_n

    def _find_penalties(self, tokens: Sequence[int]) -> dict[int, int]:
        if len(tokens) < self.min_length * 2:
            return {}
        window = trailing_window(tokens, self.last_n)
        penalize: dict[int, int] = {}
        for match in find_seqs(window, self.min_length, self.tolerance, self.max_merge):
            if not match:
                continue
            token_id = match[-1]
            penalize[token_id] = max(penalize.get(token_id, 0), len(match))
        return penalize

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if (
            not logits
            or (self.flat_penalty == 0.0 and self.stacking_penalty == 0.0)
            or self.min_length < 2
            or self.last_n < self.min_length
        ):
            return logits

        penalize = resources.with_last_tokens(self._find_penalties)
        if not penalize:
            return logits

        values = logits.logits.copy()
        changed = False
        for token_id, seqlen in penalize.items():
            idx = logits.find(token_id)
            if idx is None:
                continue
            values[idx] -= seqlen * self.stacking_penalty + (1 if seqlen > 0 else 0) * self.flat_penalty
            changed = True
        if changed:
            logits.update_logits(values)
        return logits
