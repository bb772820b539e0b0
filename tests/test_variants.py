"""
Tests for Variant Generation
============================
Tests normalization, tokenization, Metaphone, homoglyph and fuzzy variants,
and the combined VariantSet.
"""

import pytest
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nameclear.models import FormKind, WarningSeverity
from nameclear.variants import (
    generate_variants,
    generate_all_variants,
    normalize,
    strip_all,
    tokenize,
    metaphone,
    phonetic_variants,
    phonetic_signature,
    homoglyph_variants,
    are_confusable,
    fuzzy_variants,
    select_top_n,
    confusable_map,
    HOMOGLYPH_WARNING_CODE,
)
from nameclear.variants.fuzzy import DEFAULT_MAX_VARIANTS


class TestNormalize:
    """Tests for canonical name forms."""

    def test_lowercases_and_hyphenates(self):
        """Separators and spaces become single hyphens."""
        assert normalize("My Cool_Tool") == "my-cool-tool"

    def test_collapses_and_trims_hyphens(self):
        """Runs of punctuation collapse; edges are trimmed."""
        assert normalize("--Foo..Bar--") == "foo-bar"

    def test_camel_case_is_not_split(self):
        """Normalization only lowercases letters."""
        assert normalize("MyCoolTool") == "mycooltool"

    def test_empty(self):
        """Empty and punctuation-only names normalize to empty."""
        assert normalize("") == ""
        assert normalize("!!!") == ""

    def test_strip_all(self):
        """strip_all keeps only [a-z0-9]."""
        assert strip_all("My-Cool_Tool 2") == "mycooltool2"


class TestTokenize:
    """Tests for word splitting."""

    def test_camel_case(self):
        """Lower-to-upper boundaries split words."""
        assert tokenize("myCoolTool") == ["my", "cool", "tool"]

    def test_acronym_boundary(self):
        """An uppercase run followed by a word splits before the word."""
        assert tokenize("HTMLParser") == ["html", "parser"]

    def test_separators(self):
        """Hyphen, underscore, dot and whitespace all separate."""
        assert tokenize("foo_bar-baz.qux quux") == ["foo", "bar", "baz", "qux", "quux"]

    def test_no_empty_tokens(self):
        """Leading/trailing separators produce no empty tokens."""
        assert tokenize("--foo--") == ["foo"]
        assert tokenize("") == []


class TestMetaphone:
    """Tests for the Metaphone scanner."""

    def test_ph_sounds_like_f(self):
        """PH encodes as F."""
        assert metaphone("phone") == metaphone("fone")

    def test_silent_initial_k(self):
        """KN at the start drops the K; GH before a consonant is silent."""
        assert metaphone("Knight") == "NT"

    def test_th(self):
        """TH encodes as 0."""
        assert metaphone("Thomas") == "0MS"

    def test_vowels_only_kept_at_start(self):
        """A leading vowel is kept; inner vowels are dropped."""
        assert metaphone("apple") == "APL"

    def test_case_insensitive(self):
        """Case does not matter."""
        assert metaphone("COOL") == metaphone("cool") == "KL"

    def test_max_length(self):
        """Codes never exceed six characters."""
        assert len(metaphone("supercalifragilistic")) <= 6

    def test_empty_and_non_letters(self):
        """No letters means an empty code."""
        assert metaphone("") == ""
        assert metaphone("1234") == ""

    @pytest.mark.parametrize("word,code", [
        ("church", "XRX"),     # CH -> X
        ("cider", "STR"),      # C before E/I/Y -> S
        ("ship", "XP"),        # SH -> X
        ("asia", "AX"),        # SI before A/O -> X
        ("nation", "NXN"),     # TI before A/O -> X
        ("judge", "JJ"),       # DG before E/I/Y -> J
        ("edgar", "ETKR"),     # DG otherwise -> T, hard G -> K
        ("gem", "JM"),         # G before E/I/Y -> J
        ("sign", "SN"),        # terminal GN: silent G
        ("back", "BK"),        # K after C is silent
        ("queen", "KN"),       # Q -> K
        ("xray", "KSRY"),      # X -> KS; final Y counts as before a vowel
        ("zoo", "S"),          # Z -> S
        ("lawn", "LN"),        # W not before a vowel is silent
        ("ahead", "AHT"),      # H between vowels is kept
        ("lamb", "LM"),        # MB at the end: silent B
        ("schema", "SKM"),     # SCH -> SK
        ("ball", "BL"),        # doubled letters encode once
        ("accent", "AKSNT"),   # CC is not collapsed
    ])
    def test_rules(self, word, code):
        """Each rule of the scanner, one word per rule."""
        assert metaphone(word) == code

    def test_phonetic_signature(self):
        """Signatures join token codes with spaces."""
        assert phonetic_variants(["cool", "tool"]) == ["KL", "TL"]
        assert phonetic_signature(["cool", "tool"]) == "KL TL"


class TestHomoglyphs:
    """Tests for confusable character variants."""

    def test_single_substitutions(self):
        """Each confusable position is substituted once, sorted."""
        assert homoglyph_variants("go") == ["6o", "9o", "g0"]

    def test_no_confusables(self):
        """Names without confusable letters have no variants."""
        assert homoglyph_variants("mn") == []

    def test_never_contains_input(self):
        """The name itself is never a variant."""
        assert "tool" not in homoglyph_variants("tool")

    def test_are_confusable(self):
        """Substitution variants are confusable; identical names are not."""
        assert are_confusable("go", "g0")
        assert are_confusable("Go", "go")
        assert not are_confusable("go", "go")
        assert not are_confusable("go", "mn")


class TestFuzzy:
    """Tests for edit-distance=1 variants."""

    def test_deletions_present(self):
        """All single deletions of 'abc' come first."""
        variants = fuzzy_variants("abc")
        assert {"bc", "ac", "ab"} <= set(variants)
        assert variants[:3] == ["bc", "ac", "ab"]

    def test_never_contains_input(self):
        """The input never appears in its own variants."""
        assert "abc" not in fuzzy_variants("abc")

    def test_capped(self):
        """Output is capped at the configured maximum."""
        assert len(fuzzy_variants("abc")) <= DEFAULT_MAX_VARIANTS
        assert len(fuzzy_variants("abc", max_variants=5)) == 5

    def test_deduplicated_and_deterministic(self):
        """Same input, same list, no duplicates."""
        first = fuzzy_variants("tool")
        assert first == fuzzy_variants("tool")
        assert len(first) == len(set(first))

    def test_select_top_n(self):
        """select_top_n keeps the first n entries."""
        assert select_top_n(["a", "b", "c"], 2) == ["a", "b"]


class TestGenerateVariants:
    """Tests for the combined VariantSet."""

    def test_form_order(self):
        """Forms come in fixed kind order."""
        variant_set = generate_variants("MyCoolTool")
        kinds = [f.kind for f in variant_set.forms]
        assert kinds == [
            FormKind.ORIGINAL, FormKind.LOWER, FormKind.NOSPACE, FormKind.HYPHENATED,
            FormKind.UNDERSCORED, FormKind.PUNCT_STRIPPED, FormKind.PHONETIC,
            FormKind.HOMOGLYPH_SAFE,
        ]

    def test_canonical_and_values(self):
        """Canonical, hyphenated and underscored forms follow normalization."""
        variant_set = generate_variants("My Cool Tool")
        values = {f.kind: f.value for f in variant_set.forms}
        assert variant_set.canonical == "my-cool-tool"
        assert values[FormKind.HYPHENATED] == "my-cool-tool"
        assert values[FormKind.UNDERSCORED] == "my_cool_tool"
        assert values[FormKind.NOSPACE] == "mycooltool"
        assert values[FormKind.PHONETIC] == "MY KL TL"

    def test_homoglyph_warning(self):
        """Many confusables give a high-severity warning."""
        variant_set = generate_variants("MyCoolTool")
        count = len(homoglyph_variants("mycooltool"))
        assert len(variant_set.warnings) == 1
        warning = variant_set.warnings[0]
        assert warning.code == HOMOGLYPH_WARNING_CODE
        assert warning.severity is WarningSeverity.HIGH
        assert warning.message.startswith(f"{count} confusable variant(s) detected: ")
        assert warning.message.endswith("...")

    def test_few_homoglyphs_warn(self):
        """Fewer than five confusables give a warn-severity warning."""
        variant_set = generate_variants("go")
        warning = variant_set.warnings[0]
        assert warning.severity is WarningSeverity.WARN
        assert warning.message == "3 confusable variant(s) detected: 6o, 9o, g0"

    def test_no_warning_without_confusables(self):
        """No confusable letters, no warning."""
        assert generate_variants("mn").warnings == []

    def test_fuzzy_variants_attached(self):
        """The fuzzy list is computed from the canonical form."""
        variant_set = generate_variants("ABC")
        assert variant_set.fuzzy_variants == fuzzy_variants("abc")
        assert generate_variants("ABC", include_fuzzy=False).fuzzy_variants == []

    def test_to_dict_shape(self):
        """to_dict uses contract keys and enum values."""
        data = generate_variants("go").to_dict()
        assert set(data) == {"candidateMark", "canonical", "forms", "warnings", "fuzzyVariants"}
        assert data["forms"][0] == {"kind": "original", "value": "go"}
        assert data["warnings"][0]["severity"] == "warn"

    def test_generate_all_variants(self):
        """Batch generation keeps input order."""
        sets = generate_all_variants(["alpha", "beta"])
        assert [s.candidate_mark for s in sets] == ["alpha", "beta"]

    def test_deterministic(self):
        """Two runs give equal output."""
        assert generate_variants("MyCoolTool").to_dict() == generate_variants("MyCoolTool").to_dict()

    def test_confusable_map_is_a_copy(self):
        """Mutating the returned table does not change generation."""
        table = confusable_map()
        assert table["o"] == ("0",)
        table.clear()
        assert homoglyph_variants("go") == ["6o", "9o", "g0"]
