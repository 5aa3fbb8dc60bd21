import pytest

from utree_toolkit.core.models import NodeKind
from utree_toolkit.core.parser.name_decoder import NAME_TAGS, decode_name


class TestDecodeName:
    """Test cases for the node-name decoder."""

    def test_two_component_name(self):
        info = decode_name("textField~Hello")
        assert info.kind is NodeKind.TEXT_FIELD
        assert info.type_tag == "textField"
        assert info.text == "Hello"
        assert info.image_file_name == "Hello"
        assert info.modifiers == {}

    def test_image_name_and_modifiers(self):
        info = decode_name("imageDisplay~sunset~@bg=sky~@audioName=intro~A sunset")
        assert info.kind is NodeKind.IMAGE_DISPLAY
        assert info.image_file_name == "sunset"
        assert info.background_image_name == "sky"
        assert info.voice_over_audio_name == "intro"
        assert info.background_audio_name is None
        assert info.text == "A sunset"

    def test_first_modifier_wins(self):
        info = decode_name("textDisplay~@bg=first~@bg=second~Hi")
        assert info.background_image_name == "first"

    def test_unknown_modifiers_are_ignored(self):
        info = decode_name("textDisplay~@colour=red~@bgAudioName=rain~Hi")
        assert info.modifiers == {"bgAudioName": "rain"}
        assert info.background_audio_name == "rain"

    def test_unit_is_second_component(self):
        info = decode_name("textFieldWithUnit~kg~Your weight?")
        assert info.kind is NodeKind.TEXT_FIELD_WITH_UNIT
        assert info.unit == "kg"
        assert decode_name("textFieldWithUnit~Your weight?").unit is None

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("checkList~2~Tick two", 2),
            ("checkList~@target=3~Tick three", 3),
            ("checkList~2~@target=1~Tick", 1),
            ("checkList~Tick any", 0),
            ("checkList~many~Tick", 0),
            ("checkList~-4~Tick", 0),
        ],
    )
    def test_target_number_of_choices(self, raw, expected):
        assert decode_name(raw).target_number_of_choices == expected

    def test_unknown_tag_yields_no_kind(self):
        info = decode_name("spinner~Wheee")
        assert info.kind is None
        assert info.type_tag == "spinner"
        assert info.text == "Wheee"

    @pytest.mark.parametrize("raw", ["", None, "~", "~~~", "@bg=x", "textDisplay~", "{br}~Answer="])
    def test_decoding_is_total(self, raw):
        info = decode_name(raw)
        assert info.raw_name == (raw or "")
        assert isinstance(info.text, str)

    def test_single_component_has_no_second_component(self):
        info = decode_name("textDisplay")
        assert info.text == "textDisplay"
        assert info.image_file_name is None

    def test_every_tag_maps_to_a_distinct_kind(self):
        assert len(set(NAME_TAGS.values())) == len(NAME_TAGS)
        for tag, kind in NAME_TAGS.items():
            assert decode_name(f"{tag}~x").kind is kind


def test_decoded_info_is_immutable_and_hashable():
    info = decode_name("textDisplay~@bg=sky~Hi")
    assert info.components == ("textDisplay", "@bg=sky", "Hi")
    with pytest.raises(TypeError):
        info.modifiers["bg"] = "other"
    assert hash(info) == hash(decode_name("textDisplay~@bg=sky~Hi"))
    assert {info, decode_name("textDisplay~@bg=sky~Hi")} == {info}
