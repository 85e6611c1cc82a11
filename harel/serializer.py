"""
SCXML serializer

Turns a Document back into canonical SCXML text: fixed XML declaration,
namespace-qualified root, deterministic attribute and child order,
4-space indentation and self-closing empty elements. Output re-parses to
an equal Document.

Nested states and executable content are written through an explicit
work list: each element is appended to its parent as soon as it is
reached, so document order is fixed, and its attributes and children are
filled in when the element is taken off the list.
"""

from typing import Iterable, List, Optional, Tuple

from lxml import etree

from . import model
from .parser import SCXML_NAMESPACE

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "    "

STATE_TAGS = {
    model.State: "state",
    model.Parallel: "parallel",
    model.Final: "final",
    model.History: "history",
}

EXECUTABLE_TAGS = {
    model.Raise: "raise",
    model.If: "if",
    model.Foreach: "foreach",
    model.Send: "send",
    model.Script: "script",
    model.Assign: "assign",
    model.Log: "log",
    model.Cancel: "cancel",
}

Pending = List[Tuple[object, object]]


def serialize(document: model.Document) -> str:
    """Serialize a Document to SCXML text."""
    root = etree.Element(_qname("scxml"), nsmap={None: SCXML_NAMESPACE})
    root.set("version", document.version)
    _set(root, "initial", document.initial)
    _set(root, "datamodel", document.datamodel_type)
    _set(root, "name", document.name)
    _set(root, "binding", document.binding)

    if document.data:
        datamodel = _sub(root, "datamodel")
        for item in document.data:
            data = _sub(datamodel, "data")
            data.set("id", item.id)
            _set(data, "expr", item.expr)
            _set(data, "src", item.src)
            data.text = item.content

    for script in document.scripts:
        _script(_sub(root, "script"), script)

    pending: Pending = []
    _place_states(root, document.states, pending)
    while pending:
        elem, node = pending.pop()
        if isinstance(node, model.STATE_LIKE_TYPES):
            _fill_state_like(elem, node, pending)
        else:
            _fill_executable(elem, node, pending)

    etree.indent(root, space=INDENT)
    return XML_DECLARATION + "\n" + etree.tostring(root, encoding="unicode")


def _qname(tag: str) -> str:
    return f"{{{SCXML_NAMESPACE}}}{tag}"


def _sub(parent, tag: str):
    return etree.SubElement(parent, _qname(tag))


def _set(elem, name: str, value: Optional[str]) -> None:
    """Set an optional attribute; None means absent."""
    if value is not None:
        elem.set(name, value)


def _set_nonempty(elem, name: str, value: str) -> None:
    """Set an attribute the parser defaults to the empty string."""
    if value:
        elem.set(name, value)


def _place_states(parent, nodes: Iterable[model.StateLike], pending: Pending) -> None:
    """Append an element per state-like node now, fill it in later."""
    for node in nodes:
        tag = STATE_TAGS.get(type(node))
        if tag is None:
            raise TypeError(f"Unknown state-like node {node!r}")
        pending.append((_sub(parent, tag), node))


def _place_executables(parent, executables: Iterable[model.Executable], pending: Pending) -> None:
    """Append an element per executable now, fill it in later."""
    for executable in executables:
        if isinstance(executable, model.Other):
            tag = executable.tag
        else:
            tag = EXECUTABLE_TAGS.get(type(executable))
        if tag is None:
            raise TypeError(f"Unknown executable {executable!r}")
        pending.append((_sub(parent, tag), executable))


def _fill_state_like(elem, node: model.StateLike, pending: Pending) -> None:
    _set(elem, "id", node.id)
    if isinstance(node, model.State):
        _set(elem, "initial", node.initial)
        if node.initial_element is not None:
            initial = _sub(elem, "initial")
            _set(initial, "id", node.initial_element.id)
            _transition(initial, node.initial_element.transition, pending)
        _block(elem, "onentry", node.onentry, pending)
        _place_states(elem, node.children, pending)
        for transition in node.transitions:
            _transition(elem, transition, pending)
        _block(elem, "onexit", node.onexit, pending)
        for invoke in node.invokes:
            _invoke(elem, invoke, pending)
    elif isinstance(node, model.Parallel):
        _block(elem, "onentry", node.onentry, pending)
        _place_states(elem, node.children, pending)
        for transition in node.transitions:
            _transition(elem, transition, pending)
        _block(elem, "onexit", node.onexit, pending)
        for invoke in node.invokes:
            _invoke(elem, invoke, pending)
    elif isinstance(node, model.Final):
        _block(elem, "onentry", node.onentry, pending)
        _block(elem, "onexit", node.onexit, pending)
        if node.donedata is not None:
            donedata = _sub(elem, "donedata")
            _params(donedata, node.donedata.params)
            _content(donedata, node.donedata.content)
    elif isinstance(node, model.History):
        elem.set("type", node.type)
        if node.transition is not None:
            _transition(elem, node.transition, pending)
    else:
        raise TypeError(f"Unknown state-like node {node!r}")


def _block(parent, tag: str, executables: Iterable[model.Executable], pending: Pending) -> None:
    """<onentry>/<onexit> wrapper, omitted when there is nothing to run."""
    executables = tuple(executables)
    if not executables:
        return
    _place_executables(_sub(parent, tag), executables, pending)


def _transition(parent, transition: model.Transition, pending: Pending) -> None:
    elem = _sub(parent, "transition")
    _set(elem, "event", transition.event)
    _set(elem, "cond", transition.cond)
    _set(elem, "target", transition.target)
    _set(elem, "type", transition.type)
    _place_executables(elem, transition.executables, pending)


def _invoke(parent, invoke: model.Invoke, pending: Pending) -> None:
    elem = _sub(parent, "invoke")
    _set_nonempty(elem, "type", invoke.type)
    _set(elem, "src", invoke.src)
    _set(elem, "id", invoke.id)
    _set(elem, "srcexpr", invoke.srcexpr)
    _set(elem, "idlocation", invoke.idlocation)
    _set(elem, "autoforward", invoke.autoforward)
    _set(elem, "namelist", invoke.namelist)
    _params(elem, invoke.params)
    if invoke.finalize is not None:
        _place_executables(_sub(elem, "finalize"), invoke.finalize.executables, pending)
    _content(elem, invoke.content)


def _params(parent, params: Iterable[model.Param]) -> None:
    for param in params:
        elem = _sub(parent, "param")
        elem.set("name", param.name)
        _set(elem, "expr", param.expr)
        _set(elem, "location", param.location)


def _content(parent, content: Optional[model.Content]) -> None:
    if content is None:
        return
    elem = _sub(parent, "content")
    _set(elem, "expr", content.expr)
    elem.text = content.body


def _script(elem, script: model.Script) -> None:
    _set(elem, "src", script.src)
    elem.text = script.content


def _fill_executable(elem, executable: model.Executable, pending: Pending) -> None:
    if isinstance(executable, model.Raise):
        _set_nonempty(elem, "event", executable.event)
    elif isinstance(executable, model.If):
        _set_nonempty(elem, "cond", executable.cond)
        _place_executables(elem, executable.then, pending)
        if executable.else_:
            _sub(elem, "else")
            _place_executables(elem, executable.else_, pending)
    elif isinstance(executable, model.Foreach):
        _set_nonempty(elem, "array", executable.array)
        _set_nonempty(elem, "item", executable.item)
        _set(elem, "index", executable.index)
        _place_executables(elem, executable.body, pending)
    elif isinstance(executable, model.Send):
        _set_nonempty(elem, "event", executable.event)
        _set(elem, "target", executable.target)
        _set(elem, "eventexpr", executable.eventexpr)
        _set(elem, "targetexpr", executable.targetexpr)
        _set(elem, "type", executable.type)
        _set(elem, "id", executable.id)
        _set(elem, "idlocation", executable.idlocation)
        _set(elem, "delay", executable.delay)
        _set(elem, "delayexpr", executable.delayexpr)
        _set(elem, "namelist", executable.namelist)
        _params(elem, executable.params)
        _content(elem, executable.content)
    elif isinstance(executable, model.Script):
        _script(elem, executable)
    elif isinstance(executable, model.Assign):
        _set_nonempty(elem, "location", executable.location)
        _set_nonempty(elem, "expr", executable.expr)
    elif isinstance(executable, model.Log):
        _set(elem, "label", executable.label)
        _set_nonempty(elem, "expr", executable.expr)
    elif isinstance(executable, model.Cancel):
        _set_nonempty(elem, "sendid", executable.sendid)
        _set(elem, "sendidexpr", executable.sendidexpr)
    elif isinstance(executable, model.Other):
        pass
    else:
        raise TypeError(f"Unknown executable {executable!r}")
