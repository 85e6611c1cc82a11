from __future__ import annotations

import pytest

from conftest import scxml
from harel import (
    Assign,
    Cancel,
    Content,
    DataItem,
    Document,
    DoneData,
    Final,
    Finalize,
    Foreach,
    History,
    If,
    Initial,
    Invoke,
    Log,
    Other,
    Parallel,
    Param,
    ParseOptions,
    Raise,
    Script,
    Send,
    State,
    Transition,
    parse_string,
    serialize,
    validate,
)
from harel.serializer import XML_DECLARATION

RELAXED = ParseOptions(relaxed_namespace=True)


def test_canonical_layout() -> None:
    document = Document(
        initial="start",
        states=(
            State(id="start", transitions=(Transition(event="go", target="end"),)),
            Final(id="end"),
        ),
    )
    assert serialize(document) == (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<scxml xmlns="http://www.w3.org/2005/07/scxml" version="1.0" initial="start">\n'
        '    <state id="start">\n'
        '        <transition event="go" target="end"/>\n'
        "    </state>\n"
        '    <final id="end"/>\n'
        "</scxml>"
    )


def test_empty_document_is_self_closing() -> None:
    assert serialize(Document()) == (
        XML_DECLARATION + "\n"
        '<scxml xmlns="http://www.w3.org/2005/07/scxml" version="1.0"/>'
    )


def test_root_attribute_order_and_datamodel_layout() -> None:
    document = Document(
        initial="s",
        datamodel_type="ecmascript",
        name="machine",
        binding="early",
        states=(State(id="s"),),
        data=(DataItem(id="x", expr="1"), DataItem(id="y", content="[1, 2]"), DataItem(id="z")),
    )
    assert serialize(document) == (
        XML_DECLARATION + "\n"
        '<scxml xmlns="http://www.w3.org/2005/07/scxml" version="1.0" initial="s" '
        'datamodel="ecmascript" name="machine" binding="early">\n'
        "    <datamodel>\n"
        '        <data id="x" expr="1"/>\n'
        '        <data id="y">[1, 2]</data>\n'
        '        <data id="z"/>\n'
        "    </datamodel>\n"
        '    <state id="s"/>\n'
        "</scxml>"
    )


def test_empty_datamodel_is_omitted() -> None:
    assert "<datamodel" not in serialize(Document(states=(State(id="s"),)))


def test_special_characters_are_escaped() -> None:
    document = Document(states=(
        State(id="s", onentry=(Log(expr="a < b && c"), Script(content="x < y & z"))),
    ))
    text = serialize(document)
    assert '<log expr="a &lt; b &amp;&amp; c"/>' in text
    assert "<script>x &lt; y &amp; z</script>" in text
    assert parse_string(text) == document


def test_empty_blocks_are_omitted_and_history_type_is_explicit() -> None:
    document = Document(states=(
        State(id="p", children=(History(id="h"),)),
    ))
    text = serialize(document)
    assert "<onentry" not in text
    assert "<onexit" not in text
    assert '<history id="h" type="shallow"/>' in text


def test_if_without_else_emits_no_marker() -> None:
    document = Document(states=(State(id="s", onentry=(If(cond="c", then=(Raise("e"),)),)),))
    text = serialize(document)
    assert "<else" not in text
    assert parse_string(text) == document


def test_empty_finalize_survives() -> None:
    invoke = Invoke(type="scxml", finalize=Finalize())
    document = Document(states=(State(id="s", invokes=(invoke,)),))
    text = serialize(document)
    assert "<finalize/>" in text
    assert parse_string(text).states[0].invokes[0].finalize == Finalize()


def test_microwave_round_trip(fixture_text) -> None:
    document = parse_string(fixture_text("microwave.scxml"))
    text = serialize(document)
    assert parse_string(text) == document
    assert serialize(parse_string(text)) == text


def test_traffic_round_trip_in_relaxed_mode(fixture_text) -> None:
    document = parse_string(fixture_text("traffic.scxml"), RELAXED)
    text = serialize(document)
    assert text.startswith(XML_DECLARATION)
    assert parse_string(text, RELAXED) == document
    # the serializer always writes the namespace, so strict mode accepts the output
    assert parse_string(text) == document


def test_round_trip_of_every_construct() -> None:
    executables = (
        Raise("ping"),
        If(
            cond="x > 1",
            then=(Assign(location="x", expr="0"), Other("elseif")),
            else_=(Foreach(array="items", item="it", index="i", body=(Log(label="l", expr="it"),)),),
        ),
        Send(
            event="out",
            target="#_parent",
            type="scxml",
            id="sid",
            delay="1s",
            namelist="x y",
            params=(Param("p", expr="1"), Param("q", location="x")),
            content=Content(expr="payload"),
        ),
        Send(eventexpr="name", targetexpr="where", idlocation="loc", delayexpr="d"),
        Script(src="lib.js"),
        Cancel(sendid="sid"),
        Cancel(sendidexpr="expr"),
        Other("custom"),
    )
    document = Document(
        initial="main",
        datamodel_type="ecmascript",
        name="everything",
        binding="late",
        data=(DataItem(id="x", expr="1"), DataItem(id="cfg", src="cfg.json")),
        scripts=(Script(content="var a = 1;"),),
        states=(
            State(
                id="main",
                initial="a",
                initial_element=Initial(id="init", transition=Transition(target="a", executables=(Raise("booted"),))),
                onentry=executables,
                onexit=(Log(expr="'bye'"),),
                transitions=(
                    Transition(event="go", cond="ok", target="p", type="internal"),
                    Transition(event="stay"),
                ),
                children=(
                    State(id="a"),
                    History(id="h", type="deep", transition=Transition(target="a")),
                    Parallel(
                        id="p",
                        onentry=(Raise("enter"),),
                        onexit=(Raise("exit"),),
                        children=(State(id="r1"), State(id="r2")),
                        transitions=(Transition(target="r1 r2"),),
                        invokes=(Invoke(src="sub.scxml"),),
                    ),
                ),
                invokes=(
                    Invoke(
                        type="http://www.w3.org/TR/scxml/",
                        src="child.scxml",
                        id="child",
                        srcexpr="where",
                        idlocation="loc",
                        autoforward="true",
                        namelist="x",
                        params=(Param("n", expr="x"),),
                        finalize=Finalize((Assign(location="x", expr="_event.data"),)),
                        content=Content(body="<inline>"),
                    ),
                ),
            ),
            Final(
                id="done",
                onentry=(Raise("finished"),),
                onexit=(Log(expr="1"),),
                donedata=DoneData(params=(Param("result", expr="x"),), content=Content(expr="x")),
            ),
        ),
    )
    validate(document)
    text = serialize(document)
    assert parse_string(text) == document
    assert parse_string(text, RELAXED) == document


def test_parsed_document_round_trips() -> None:
    document = parse_string(scxml(
        '<state id="s"><onentry><if cond="c"><a/><else/><b/></if></onentry></state>'
    ))
    assert parse_string(serialize(document)) == document


def test_unknown_state_like_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        serialize(Document(states=(Transition(target="x"),)))


def test_unknown_executable_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        serialize(Document(states=(State(id="s", onentry=(Param("p"),)),)))


def test_deeply_nested_states_serialize_without_recursion() -> None:
    node = State(id="s0")
    for i in range(1, 1500):
        node = State(id=f"s{i}", children=(node,))
    document = Document(initial="s1499", states=(node,))
    validate(document)
    text = serialize(document)
    assert text.count("<state ") == 1500
    assert text.index('id="s1499"') < text.index('id="s0"')
    assert '<state id="s0"/>' in text


def test_deeply_nested_executables_serialize_without_recursion() -> None:
    action = Raise("innermost")
    for _ in range(1500):
        action = If(cond="c", then=(action,), else_=(Log(expr="x"),))
    text = serialize(Document(states=(State(id="s", onentry=(action,)),)))
    assert text.count("<if ") == 1500
    assert text.count("<else/>") == 1500
    assert '<raise event="innermost"/>' in text


def test_work_list_keeps_document_order() -> None:
    document = Document(states=(
        State(id="a", children=(State(id="a1"), State(id="a2"))),
        State(id="b", onentry=(Raise("one"), If(then=(Raise("two"),)), Raise("three"))),
    ))
    text = serialize(document)
    order = [text.index(marker) for marker in ('"a"', '"a1"', '"a2"', '"b"', '"one"', '"two"', '"three"')]
    assert order == sorted(order)
    assert parse_string(text) == document
