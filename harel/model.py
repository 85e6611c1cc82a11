"""
SCXML document model

Immutable AST produced by the parser and consumed by the validator and
serializer. Every ordered collection is a tuple so that nodes can be
compared structurally and shared freely once built.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Raise:
    """W3C SCXML 4.4: <raise>"""
    event: str = ""


@dataclass(frozen=True)
class If:
    """W3C SCXML 4.3: <if> with branches partitioned by <else/>"""
    cond: str = ""
    then: Tuple["Executable", ...] = ()
    else_: Tuple["Executable", ...] = ()


@dataclass(frozen=True)
class Foreach:
    """W3C SCXML 4.6: <foreach>"""
    array: str = ""
    item: str = ""
    index: Optional[str] = None
    body: Tuple["Executable", ...] = ()


@dataclass(frozen=True)
class Param:
    """W3C SCXML 5.7: <param>"""
    name: str
    expr: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class Content:
    """W3C SCXML 5.6: <content>"""
    expr: Optional[str] = None
    body: Optional[str] = None  # trimmed inline text


@dataclass(frozen=True)
class Send:
    """W3C SCXML 6.2: <send>"""
    event: str = ""
    target: Optional[str] = None
    eventexpr: Optional[str] = None
    targetexpr: Optional[str] = None
    type: Optional[str] = None
    id: Optional[str] = None
    idlocation: Optional[str] = None
    delay: Optional[str] = None
    delayexpr: Optional[str] = None
    namelist: Optional[str] = None
    params: Tuple[Param, ...] = ()
    content: Optional[Content] = None


@dataclass(frozen=True)
class Script:
    """W3C SCXML 5.8: <script>"""
    src: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class Assign:
    """W3C SCXML 5.4: <assign>"""
    location: str = ""
    expr: str = ""


@dataclass(frozen=True)
class Log:
    """W3C SCXML 4.7: <log>"""
    label: Optional[str] = None
    expr: str = ""


@dataclass(frozen=True)
class Cancel:
    """W3C SCXML 6.3: <cancel>"""
    sendid: str = ""
    sendidexpr: Optional[str] = None


@dataclass(frozen=True)
class Other:
    """Unrecognized executable element, kept by tag name only"""
    tag: str


Executable = Union[Raise, If, Foreach, Send, Script, Assign, Log, Cancel, Other]
EXECUTABLE_TYPES = (Raise, If, Foreach, Send, Script, Assign, Log, Cancel, Other)


@dataclass(frozen=True)
class Transition:
    """W3C SCXML 3.5: <transition>"""
    event: Optional[str] = None
    cond: Optional[str] = None
    target: Optional[str] = None  # space-separated state ids
    type: Optional[str] = None  # internal or external
    executables: Tuple[Executable, ...] = ()

    @property
    def targets(self) -> Tuple[str, ...]:
        return tuple(self.target.split()) if self.target else ()


@dataclass(frozen=True)
class Initial:
    """W3C SCXML 3.6: <initial> pseudo-state"""
    transition: Transition
    id: Optional[str] = None


@dataclass(frozen=True)
class Finalize:
    """W3C SCXML 6.5: <finalize>"""
    executables: Tuple[Executable, ...] = ()


@dataclass(frozen=True)
class Invoke:
    """W3C SCXML 6.4: <invoke>"""
    type: str = ""
    src: Optional[str] = None
    id: Optional[str] = None
    srcexpr: Optional[str] = None
    idlocation: Optional[str] = None
    autoforward: Optional[str] = None
    namelist: Optional[str] = None
    params: Tuple[Param, ...] = ()
    finalize: Optional[Finalize] = None
    content: Optional[Content] = None


@dataclass(frozen=True)
class DoneData:
    """W3C SCXML 5.5: <donedata>"""
    params: Tuple[Param, ...] = ()
    content: Optional[Content] = None


@dataclass(frozen=True)
class State:
    """W3C SCXML 3.3: <state>"""
    id: Optional[str] = None
    initial: Optional[str] = None
    initial_element: Optional[Initial] = None
    transitions: Tuple[Transition, ...] = ()
    onentry: Tuple[Executable, ...] = ()
    onexit: Tuple[Executable, ...] = ()
    children: Tuple["StateLike", ...] = ()
    invokes: Tuple[Invoke, ...] = ()


@dataclass(frozen=True)
class Parallel:
    """W3C SCXML 3.4: <parallel>"""
    id: Optional[str] = None
    transitions: Tuple[Transition, ...] = ()
    onentry: Tuple[Executable, ...] = ()
    onexit: Tuple[Executable, ...] = ()
    children: Tuple["StateLike", ...] = ()
    invokes: Tuple[Invoke, ...] = ()


@dataclass(frozen=True)
class Final:
    """W3C SCXML 3.7: <final>"""
    id: Optional[str] = None
    onentry: Tuple[Executable, ...] = ()
    onexit: Tuple[Executable, ...] = ()
    donedata: Optional[DoneData] = None


@dataclass(frozen=True)
class History:
    """W3C SCXML 3.11: <history>"""
    id: Optional[str] = None
    type: str = "shallow"  # shallow or deep
    transition: Optional[Transition] = None


StateLike = Union[State, Parallel, Final, History]
STATE_LIKE_TYPES = (State, Parallel, Final, History)


@dataclass(frozen=True)
class DataItem:
    """W3C SCXML 5.3: <data>"""
    id: str
    expr: Optional[str] = None
    src: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class Document:
    """W3C SCXML 3.2: <scxml> root"""
    version: str = "1.0"
    initial: Optional[str] = None
    datamodel_type: Optional[str] = None
    name: Optional[str] = None
    binding: Optional[str] = None  # early or late
    states: Tuple[StateLike, ...] = ()
    data: Tuple[DataItem, ...] = ()
    scripts: Tuple[Script, ...] = ()


def child_states(node: StateLike) -> Tuple[StateLike, ...]:
    """Nested state-like children; finals and histories have none."""
    if isinstance(node, (State, Parallel)):
        return node.children
    if isinstance(node, (Final, History)):
        return ()
    raise TypeError(f"Unknown state-like node {node!r}")


def node_transitions(node: StateLike) -> Tuple[Transition, ...]:
    """Transitions owned by a state-like node, history default included."""
    if isinstance(node, (State, Parallel)):
        return node.transitions
    if isinstance(node, History):
        return (node.transition,) if node.transition is not None else ()
    if isinstance(node, Final):
        return ()
    raise TypeError(f"Unknown state-like node {node!r}")
