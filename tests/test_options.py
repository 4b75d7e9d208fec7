from swiftdemangle import PrintOptions
from swiftdemangle.codegen.options import CORPUS_OPTIONS


def test_presets_are_unions_of_toggles():
    assert PrintOptions.DEFAULT & PrintOptions.QUALIFY_ENTITIES
    assert not PrintOptions.DEFAULT & PrintOptions.SYNTHESIZE_SUGAR
    assert PrintOptions.SIMPLIFIED & PrintOptions.SHORTEN_THUNK
    assert CORPUS_OPTIONS == PrintOptions.DEFAULT | PrintOptions.SYNTHESIZE_SUGAR


def test_parse_names_accepts_several_spellings():
    flags, unknown = PrintOptions.parse_names("qualifyEntities, SHORTEN_THUNK display-objc-module")
    assert unknown == []
    assert flags == (PrintOptions.QUALIFY_ENTITIES | PrintOptions.SHORTEN_THUNK
                     | PrintOptions.DISPLAY_OBJC_MODULE)


def test_parse_names_presets_and_alias():
    flags, unknown = PrintOptions.parse_names("default,synthesizeSugarOnTypes")
    assert unknown == []
    assert flags == CORPUS_OPTIONS


def test_parse_names_reports_unknown():
    flags, unknown = PrintOptions.parse_names("qualifyEntities,bogus")
    assert flags == PrintOptions.QUALIFY_ENTITIES
    assert unknown == ["bogus"]


def test_simplified_keeps_default_presentation():
    assert PrintOptions.SIMPLIFIED & PrintOptions.DEFAULT == PrintOptions.DEFAULT
    extra = PrintOptions.SIMPLIFIED ^ PrintOptions.DEFAULT
    assert extra == (PrintOptions.SYNTHESIZE_SUGAR | PrintOptions.SHORTEN_PARTIAL_APPLY
                     | PrintOptions.SHORTEN_THUNK | PrintOptions.SHORTEN_VALUE_WITNESS
                     | PrintOptions.SHORTEN_ARCHETYPE)
