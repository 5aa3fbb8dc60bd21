import pytest

from utree_toolkit.core.assets import AssetResolver
from utree_toolkit.core.importers.tree_loader import ElementCategory, TreeLoader
from utree_toolkit.core.localization import LocalizationResolver
from utree_toolkit.core.models import (
    NODE_CLASS_BY_KIND,
    DisplayNode,
    NodeKind,
    SelectionNode,
    TextInputNode,
)
from utree_toolkit.core.services.node_factory import (
    END_STATE_TEXT,
    UNKNOWN_NODE_TEXT,
    NodeFactory,
)

KINDS_PROCESS = """<process-definition lang="English">
  <start-state name="start"><transition to="textDisplay~Hello{BR}world"/></start-state>
  <task-node name="textDisplay~Hello{BR}world"><transition to="end"/></task-node>
  <task-node name="imageDisplay~sunset~A caption nobody sees"><transition to="end"/></task-node>
  <task-node name="textImageDisplay~sunset~@bg=sky~Look"><transition to="end"/></task-node>
  <task-node name="imageTextDisplay~nothing~Gone"><transition to="end"/></task-node>
  <task-node name="timestampDisplay~Started"><transition to="end"/></task-node>
  <task-node name="textField~Hello"><transition to="end"/></task-node>
  <task-node name="textFieldNumerical~How many?"><transition to="end"/></task-node>
  <task-node name="textFieldWithUnit~kg~Weight?"><transition to="end"/></task-node>
  <task-node name="textFieldWithAnswer~Q~Answer=42">
    <transition name="Yes" to="end"/>
    <transition name="No" to="end"/>
  </task-node>
  <task-node name="textFieldWithAnswer~@audioName=q1~Answer=42">
    <transition name="Yes" to="end"/>
  </task-node>
  <task-node name="textAreaWithAnswer~Describe it">
    <transition to="end"/>
  </task-node>
  <task-node name="textArea~Notes"><transition to="end"/></task-node>
  <task-node name="date~When?"><transition to="end"/></task-node>
  <task-node name="radioButtons~Pick">
    <task name="A"/>
    <task name="B"/>
    <transition name="A" to="nodeA"/>
    <transition name="B" to="nodeB"/>
  </task-node>
  <task-node name="radioButtonsWithAnswer~Which is first?Answer=0">
    <task name="Alpha"/>
    <task name="Beta"/>
    <transition name="Yes" to="end"/>
    <transition name="No" to="end"/>
  </task-node>
  <task-node name="checkList~2~Tick two">
    <task name="One"/>
    <task name="Two"/>
    <task name="Three"/>
    <transition name="Yes" to="end"/>
    <transition name="No" to="end"/>
  </task-node>
  <task-node name="classification~Sort these">
    <task name="Small"/>
    <task name="Large"/>
    <transition to="end"/>
  </task-node>
  <task-node name="link~Go where?">
    <task name="textDisplay~Chapter two~Chapter two"/>
    <task name="Stay"/>
    <transition name="Stay" to="textField~Hello~link"/>
  </task-node>
  <decision name="decision~Route">
    <transition name="North" to="end"/>
    <transition name="South"/>
  </decision>
  <task-node name="spinner~Wheee"><transition to="end"/></task-node>
  <end-state name="end"/>
</process-definition>
"""


@pytest.fixture
def kinds_bundle(make_bundle):
    return make_bundle(
        KINDS_PROCESS,
        translations={"French": {"Pick": "Choisir", "A": "Un", "Hello": "Bonjour", "Q": "Question"}},
        files=["res/sunset.png", "res/sky.jpg", "res/bg.gif"],
    )


@pytest.fixture
def make_factory(kinds_bundle):
    def factory(language=None):
        document = TreeLoader().load(kinds_bundle)
        localization = LocalizationResolver(document, language)
        return NodeFactory(document, localization, AssetResolver(kinds_bundle))
    return factory


@pytest.fixture
def factory(make_factory):
    return make_factory()


def test_every_kind_except_end_state_and_unknown_has_a_builder(factory):
    expected = set(NodeKind) - {NodeKind.END_STATE, NodeKind.UNKNOWN}
    assert factory.supported_kinds == expected


def test_built_node_class_matches_kind(factory, kinds_bundle):
    document = TreeLoader().load(kinds_bundle)
    for element in document.process_definition:
        name = element.get("name")
        if name is None or element.tag == "start-state":
            continue
        result = factory.build(name)
        assert isinstance(result.node, NODE_CLASS_BY_KIND[result.node.kind])


def test_text_display_applies_markup(factory):
    result = factory.build("textDisplay~Hello{BR}world")
    assert isinstance(result.node, DisplayNode)
    assert result.node.kind is NodeKind.TEXT_DISPLAY
    assert result.node.text == "Hello\nworld"
    assert result.transition_table == {"Any": "end"}
    assert result.category is ElementCategory.TASK_NODE


def test_image_kinds(factory, kinds_bundle):
    image_only = factory.build("imageDisplay~sunset~A caption nobody sees").node
    assert image_only.text == ""
    assert image_only.image_path == kinds_bundle / "res" / "sunset.png"

    text_image = factory.build("textImageDisplay~sunset~@bg=sky~Look")
    assert text_image.node.text == "Look"
    assert text_image.node.image_path == kinds_bundle / "res" / "sunset.png"
    assert text_image.assets.background_image == kinds_bundle / "res" / "sky.jpg"

    missing = factory.build("imageTextDisplay~nothing~Gone").node
    assert missing.image_path is None
    assert missing.text == "Gone"


def test_default_background(factory, kinds_bundle):
    result = factory.build("textField~Hello")
    assert result.assets.background_image == kinds_bundle / "res" / "bg.gif"


def test_text_field_scenario(factory):
    result = factory.build("textField~Hello")
    assert isinstance(result.node, TextInputNode)
    assert result.node.kind is NodeKind.TEXT_FIELD
    assert result.node.text == "Hello"
    assert result.node.text_input == ""
    assert result.transition_table == {"Any": "end"}


def test_text_input_variants(factory):
    numerical = factory.build("textFieldNumerical~How many?").node
    assert numerical.is_numerical

    unit = factory.build("textFieldWithUnit~kg~Weight?").node
    assert unit.unit == "kg"
    assert unit.text == "Weight?"

    area = factory.build("textArea~Notes").node
    assert area.is_multiline
    assert area.kind is NodeKind.TEXT_AREA

    assert factory.build("date~When?").node.kind is NodeKind.DATE
    assert factory.build("timestampDisplay~Started").node.kind is NodeKind.TIMESTAMP


def test_answer_in_own_component(factory):
    result = factory.build("textFieldWithAnswer~Q~Answer=42")
    assert result.node.text == "Q"
    assert result.node.target_answers == "42"
    assert result.transition_table == {"Yes": "end", "No": "end"}


def test_modifier_before_answer_is_not_question_text(factory):
    result = factory.build("textFieldWithAnswer~@audioName=q1~Answer=42")
    assert result.node.text == ""
    assert result.node.target_answers == "42"
    assert result.name_info.voice_over_audio_name == "q1"

def test_answer_kind_without_marker(factory):
    node = factory.build("textAreaWithAnswer~Describe it").node
    assert node.text == "Describe it"
    assert node.target_answers is None


def test_radio_buttons_scenario(factory):
    result = factory.build("radioButtons~Pick")
    node = result.node
    assert isinstance(node, SelectionNode)
    assert node.options == ["A", "B"]
    assert node.selected_indices == set()
    assert result.transition_table == {"A": "nodeA", "B": "nodeB"}


def test_radio_buttons_with_answer_index(factory):
    node = factory.build("radioButtonsWithAnswer~Which is first?Answer=0").node
    assert node.text == "Which is first?"
    assert node.target_index == 0
    assert node.options == ["Alpha", "Beta"]


def test_checklist_target(factory):
    result = factory.build("checkList~2~Tick two")
    assert result.node.target_ticks == 2
    assert result.node.options == ["One", "Two", "Three"]
    assert result.node.allows_multiple
    assert result.node.text == "Tick two"


def test_classification_numbers_options(factory):
    node = factory.build("classification~Sort these").node
    assert node.options == ["1) Small", "2) Large"]
    assert not node.is_selection_type


def test_link_targets(factory):
    result = factory.build("link~Go where?")
    assert result.node.options == ["Chapter two", "Stay"]
    assert result.transition_table == {
        "Chapter two": "textDisplay~Chapter two",
        "Stay": "textField~Hello",
    }


def test_decision_options_come_from_transitions(factory):
    result = factory.build("decision~Route")
    assert result.category is ElementCategory.DECISION
    assert result.node.kind is NodeKind.DECISION
    assert result.node.options == ["North", "South"]
    assert result.transition_table == {"North": "end", "South": ""}


def test_end_state(factory):
    result = factory.build("end")
    assert result.node.kind is NodeKind.END_STATE
    assert result.node.text == END_STATE_TEXT
    assert result.transition_table == {}


def test_unknown_name_yields_placeholder(factory):
    result = factory.build("textDisplay~Not in the document")
    assert result.is_placeholder
    assert result.node.text == UNKNOWN_NODE_TEXT
    assert result.transition_table == {}
    assert result.category is None


def test_unknown_type_tag_yields_placeholder(factory):
    result = factory.build("spinner~Wheee")
    assert result.is_placeholder
    assert result.category is ElementCategory.TASK_NODE
    assert result.name_info.type_tag == "spinner"


def test_translated_build_keeps_untranslated_keys(make_factory):
    factory = make_factory("French")
    result = factory.build("radioButtons~Pick")
    assert result.node.text == "Choisir"
    assert result.node.options == ["Un", "B"]
    assert result.node.option_keys == ["A", "B"]
    assert result.transition_table == {"A": "nodeA", "B": "nodeB"}


def test_translated_answer_question(make_factory):
    node = make_factory("French").build("textFieldWithAnswer~Q~Answer=42").node
    assert node.text == "Question"
    assert node.target_answers == "42"


def test_builds_are_independent(factory):
    first = factory.build("radioButtons~Pick")
    first.node.select(0)
    first.transition_table["C"] = "elsewhere"
    second = factory.build("radioButtons~Pick")
    assert second.node.selected_indices == set()
    assert "C" not in second.transition_table
