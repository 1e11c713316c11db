"""Tests for Shamir Secret Sharing over GF(256)."""

import itertools
import random

import pytest

from lockbox.crypto.errors import (
    DuplicateXCoordinate,
    InsufficientShares,
    InvalidByte,
    InvalidThreshold,
    NoShares,
    ShamirError,
    TooManyShares,
    UnequalKeyLengths,
)
from lockbox.crypto.rng import SeededEntropy
from lockbox.crypto.shamir import (
    CombineOptions,
    SplitOptions,
    combine,
    get_x,
    get_y,
    split,
    to_bytes,
)


SECRET = b"correct horse battery staple"


def corrupt(key: bytes) -> bytes:
    """Flip every y byte, keeping the x-coordinate."""
    return bytes([key[0]]) + bytes(b ^ 0xFF for b in key[1:])


class TestKey:
    """Tests for key layout and accessors."""

    def test_layout(self, entropy):
        keys = split(SECRET, 3, 5, entropy)

        assert len(keys) == 5
        for j, key in enumerate(keys):
            assert len(key) == 1 + len(SECRET)
            assert get_x(key) == j + 1

    def test_text_key_accessors(self):
        """Characters of a text key are read as byte values."""
        assert get_x("abc") == 97
        assert get_y("abc", 1) == 99

    def test_list_key_accessors(self):
        assert get_x([4, 200]) == 4
        assert get_y([4, 200], 0) == 200

    def test_accessor_out_of_range(self):
        with pytest.raises(InvalidByte):
            get_x("\u20ac")
        with pytest.raises(InvalidByte):
            get_y([1, 300], 0)

    def test_get_y(self):
        key = bytes([7, 10, 20, 30])
        assert get_x(key) == 7
        assert get_y(key, 0) == 10
        assert get_y(key, 2) == 30

    def test_default_n_equals_k(self, entropy):
        assert len(split(SECRET, 4, entropy=entropy)) == 4


class TestSecretInput:
    """Tests for secret normalization."""

    def test_bytes_like(self):
        assert to_bytes(b"abc") == b"abc"
        assert to_bytes(bytearray(b"abc")) == b"abc"
        assert to_bytes(memoryview(b"abc")) == b"abc"

    def test_text(self):
        assert to_bytes("abc") == b"abc"
        assert to_bytes("\xe9") == b"\xe9"

    def test_int_sequence(self):
        assert to_bytes([0, 1, 255]) == b"\x00\x01\xff"

    def test_text_out_of_range(self):
        with pytest.raises(InvalidByte, match=r"index 2") as exc:
            to_bytes("ab€")
        assert exc.value.index == 2
        assert exc.value.value == 0x20AC

    def test_int_out_of_range(self, entropy):
        with pytest.raises(InvalidByte) as exc:
            split([1, 2, 256], 2, 3, entropy)
        assert exc.value.index == 2

    def test_text_round_trip(self, entropy):
        keys = split("hello", 2, 3, entropy)
        assert combine(keys[:2]) == b"hello"


class TestSplitValidation:
    """Tests for split() parameter checks."""

    def test_threshold_too_small(self):
        with pytest.raises(InvalidThreshold, match="at least 2"):
            split(SECRET, 1, 3)

    def test_n_less_than_k(self):
        with pytest.raises(InsufficientShares):
            split(SECRET, 5, 3)

    def test_too_many_shares(self):
        with pytest.raises(TooManyShares, match="255"):
            split(SECRET, 2, 256)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            split(SECRET, 1)

    def test_validation_consumes_no_entropy(self, counting_entropy):
        with pytest.raises(InvalidByte):
            split("okĀ", 2, 3, counting_entropy)
        assert counting_entropy.requests == []


class TestSplit:
    """Tests for share generation."""

    def test_zero_entropy_scenario(self, zero_entropy):
        """With all-zero coefficients p(x) = secret for every x."""
        keys = split([0x00], 2, 2, zero_entropy)

        assert keys == [bytes([1, 0x00]), bytes([2, 0x00])]
        assert combine(keys) == bytes([0x00])

    def test_zero_entropy_repeats_secret(self, zero_entropy):
        keys = split(b"\x42\x99", 3, 4, zero_entropy)
        for key in keys:
            assert key[1:] == b"\x42\x99"

    def test_entropy_per_byte(self, counting_entropy):
        """k - 1 random coefficients are drawn for every secret byte."""
        split(b"abcd", 3, 5, counting_entropy)
        assert counting_entropy.requests == [2, 2, 2, 2]

    def test_seeded_is_reproducible(self):
        assert split(SECRET, 3, 5, SeededEntropy(9)) == split(
            SECRET, 3, 5, SeededEntropy(9)
        )

    def test_different_seeds_differ(self):
        assert split(SECRET, 3, 5, SeededEntropy(1)) != split(
            SECRET, 3, 5, SeededEntropy(2)
        )

    def test_empty_secret(self, entropy):
        keys = split(b"", 2, 3, entropy)
        assert keys == [b"\x01", b"\x02", b"\x03"]
        assert combine(keys[1:]) == b""

    def test_default_entropy(self):
        keys = split(SECRET, 2, 3)
        assert combine([keys[0], keys[2]]) == SECRET


class TestRoundTrip:
    """Any k keys recover the secret."""

    def test_every_subset(self, entropy):
        keys = split(SECRET, 3, 6, entropy)
        for subset in itertools.combinations(keys, 3):
            assert combine(list(subset)) == SECRET

    def test_more_than_threshold(self, entropy):
        keys = split(SECRET, 3, 6, entropy)
        assert combine(keys) == SECRET
        assert combine(keys[1:5]) == SECRET

    def test_order_does_not_matter(self, entropy):
        keys = split(SECRET, 3, 5, entropy)
        assert combine([keys[4], keys[0], keys[2]]) == SECRET

    @pytest.mark.parametrize("k,n", [(2, 2), (2, 255), (5, 9), (17, 20), (255, 255)])
    def test_parameters(self, entropy, k, n):
        secret = bytes(range(16))
        keys = split(secret, k, n, entropy)
        rng = random.Random(k * 1000 + n)
        for _ in range(3):
            assert combine(rng.sample(keys, k)) == secret

    def test_all_byte_values(self, entropy):
        secret = bytes(range(256))
        keys = split(secret, 2, 3, entropy)
        assert combine(keys[:2]) == secret

    def test_int_list_keys(self, entropy):
        keys = split(SECRET, 2, 2, entropy)
        assert combine([list(key) for key in keys]) == SECRET


class TestThreshold:
    """Fewer than k keys reveal nothing."""

    def test_insufficient_keys_give_wrong_result(self):
        # Probability of an accidental match is 2^-128 per trial
        secret = bytes(range(100, 116))
        for seed in range(50):
            keys = split(secret, 3, 5, SeededEntropy(seed))
            assert combine(keys[:2]) != secret

    def test_single_key_is_not_the_secret(self):
        secret = bytes(range(100, 116))
        mismatches = 0
        for seed in range(50):
            keys = split(secret, 2, 2, SeededEntropy(seed))
            if combine(keys[:1]) != secret:
                mismatches += 1
        assert mismatches == 50


class TestCombineValidation:
    """Tests for combine() input checks."""

    def test_no_shares(self):
        with pytest.raises(NoShares):
            combine([])

    def test_unequal_lengths(self):
        with pytest.raises(UnequalKeyLengths):
            combine([bytes([1, 2, 3]), bytes([2, 3])])

    def test_duplicate_x(self):
        with pytest.raises(DuplicateXCoordinate) as exc:
            combine([bytes([3, 0x10]), bytes([3, 0x20])])
        assert exc.value.x == 3
        assert (exc.value.first, exc.value.second) == (0, 1)

    def test_empty_key(self):
        with pytest.raises(ShamirError):
            combine([b"", b""])

    def test_invalid_threshold(self, entropy):
        keys = split(SECRET, 2, 3, entropy)
        with pytest.raises(InvalidThreshold):
            combine(keys, k=0)

    def test_k_clamped(self, entropy):
        keys = split(SECRET, 3, 3, entropy)
        assert combine(keys, k=10) == SECRET

    def test_invalid_byte_in_key(self):
        with pytest.raises(InvalidByte):
            combine([[1, 300], [2, 5]])


class TestSearch:
    """Tests for predicate-driven combination search."""

    @pytest.fixture
    def mixed_keys(self, entropy):
        """Five keys where only keys[1] and keys[3] are genuine."""
        keys = split(SECRET, 2, 5, entropy)
        return [
            corrupt(keys[0]),
            keys[1],
            corrupt(keys[2]),
            keys[3],
            corrupt(keys[4]),
        ]

    def test_finds_genuine_subset(self, mixed_keys):
        tried = []

        def pred(candidate):
            tried.append(candidate)
            return candidate == SECRET

        assert combine(mixed_keys, k=2, predicate=pred) == SECRET
        # (0,1) (0,2) (0,3) (0,4) (1,2) (1,3)
        assert len(tried) == 6

    def test_no_subset_satisfies(self, mixed_keys):
        assert combine(mixed_keys, k=2, predicate=lambda s: False) is None

    def test_without_predicate_takes_first_subset(self, mixed_keys):
        assert combine(mixed_keys, k=2) == combine(mixed_keys[:2])

    def test_duplicate_x_in_search_raises(self, entropy):
        """A combination with a repeated x-coordinate is reported, not skipped."""
        keys = split(SECRET, 2, 3, entropy)
        candidates = [keys[0], keys[0], keys[2]]
        with pytest.raises(DuplicateXCoordinate) as exc:
            combine(candidates, k=2, predicate=lambda s: s == SECRET)
        assert exc.value.x == 1

    def test_duplicate_x_in_search_without_predicate(self, entropy):
        keys = split(SECRET, 2, 3, entropy)
        with pytest.raises(DuplicateXCoordinate):
            combine([keys[0], keys[0], keys[2]], k=2)

    def test_full_set_predicate_rejects(self, entropy):
        keys = split(SECRET, 2, 2, entropy)
        assert combine(keys, predicate=lambda s: False) is None
        assert combine(keys, predicate=lambda s: s == SECRET) == SECRET

    def test_larger_threshold(self, entropy):
        keys = split(SECRET, 3, 6, entropy)
        mixed = [corrupt(keys[0]), keys[1], keys[2], corrupt(keys[3]), keys[4]]
        found = combine(mixed, k=3, predicate=lambda s: s == SECRET)
        assert found == SECRET


class TestOptions:
    """Tests for option structures."""

    def test_split_options(self, entropy):
        options = SplitOptions(threshold=2, total_shares=4, entropy=entropy)
        keys = options.split(SECRET)
        assert len(keys) == 4
        assert CombineOptions().combine(keys[2:]) == SECRET

    def test_combine_options(self, entropy):
        keys = split(SECRET, 2, 4, entropy)
        bad = [corrupt(keys[0])] + keys[1:]
        options = CombineOptions(threshold=2, predicate=lambda s: s == SECRET)
        assert options.combine(bad) == SECRET

    def test_split_options_defaults(self):
        options = SplitOptions(threshold=3)
        assert options.total_shares is None
        assert len(options.split(b"x")) == 3
