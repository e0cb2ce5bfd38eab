"""Tests for the attribution scorer."""

from pronoun_fixer.models import CharacterEntry
from pronoun_fixer.nodes.attribution import (
    ACCEPT_THRESHOLD,
    attributed_gender,
    best_match,
    detect_dialogue_speaker_gender,
    detect_passive_agent_gender,
    score_entry,
)


def test_name_score_scales_with_length():
    mary = CharacterEntry("Mary", "female")
    assert score_entry("Mary waved. Mary left.", mary) == 2 * (1000 + 24)


def test_name_length_bonus_is_capped():
    entry = CharacterEntry("A" * 50, "male")
    assert score_entry("A" * 50, entry) == 1000 + 220


def test_single_short_alias_qualifies():
    entry = CharacterEntry("Lan", "female", ("Bai",))
    assert score_entry("Bai nodded.", entry) == 315
    assert best_match("Bai nodded.", [entry]) is entry


def test_zero_occurrences_never_qualify():
    entry = CharacterEntry("Lan", "female", ("Bai",))
    assert score_entry("Nobody here.", entry) == 0
    assert best_match("Nobody here.", [entry]) is None


def test_primary_bonus_alone_is_below_threshold():
    entry = CharacterEntry("Lan", "female")
    assert score_entry("Nobody here.", entry, primary_character="Lan") == 250
    assert 250 < ACCEPT_THRESHOLD
    assert best_match("Nobody here.", [entry], primary_character="Lan") is None


def test_matching_is_case_sensitive():
    entry = CharacterEntry("Mary", "female")
    assert best_match("mary waved.", [entry]) is None


def test_longer_name_beats_contained_shorter_name():
    ann = CharacterEntry("Ann", "female")
    anna = CharacterEntry("Anna", "male")
    assert best_match("Anna waved.", [ann, anna]) is anna


def test_tie_keeps_first_entry_unless_primary():
    john = CharacterEntry("John", "male")
    mary = CharacterEntry("Mary", "female")
    text = "John and Mary"
    assert best_match(text, [john, mary]) is john
    assert best_match(text, [john, mary], primary_character="Mary") is mary


def test_attributed_gender_requires_definite_gender():
    ghost = CharacterEntry("Ghost", "unknown")
    assert best_match("Ghost appeared.", [ghost]) is ghost
    assert attributed_gender("Ghost appeared.", [ghost]) is None
    assert attributed_gender("Mary left.", [CharacterEntry("Mary", "female")]) == "female"


MARY = CharacterEntry("Mary", "female")
JOHN = CharacterEntry("John", "male")


def test_dialogue_speaker_after_quote():
    assert detect_dialogue_speaker_gender('"Stay back," said John.', [MARY, JOHN]) == "male"


def test_dialogue_speaker_before_quote():
    assert detect_dialogue_speaker_gender('Mary said, "Run."', [MARY, JOHN]) == "female"


def test_dialogue_speakers_of_both_genders_cancel_out():
    text = 'Mary said, "Run." "Never," replied John.'
    assert detect_dialogue_speaker_gender(text, [MARY, JOHN]) is None


def test_passive_agent():
    assert detect_passive_agent_gender("The door was kicked open by John.", [MARY, JOHN]) == "male"
    assert detect_passive_agent_gender("John kicked the door open.", [MARY, JOHN]) is None
