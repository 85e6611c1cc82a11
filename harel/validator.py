"""
SCXML document validator

Read-only checks over a parsed Document. Validation is fail-fast: the
first violation found is raised. Every walk is a pre-order depth-first
traversal driven by an explicit stack, so deeply nested documents do not
consume interpreter stack.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Set

from . import model
from .errors import (
    CircularInitial,
    DuplicateId,
    InvalidDatamodel,
    InvalidTarget,
    MissingElement,
)

logger = logging.getLogger(__name__)


def iter_states(states: Iterable[model.StateLike]) -> Iterator[model.StateLike]:
    """Yield every state-like node in document order (pre-order)."""
    stack = list(reversed(tuple(states)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(model.child_states(node)))


def validate(document: model.Document) -> None:
    """
    Validate a Document

    Checks, in order:
    - state ids are unique across the whole document
    - every transition target, state initial and <initial> target resolves
    - the root initial resolves
    - initial references do not form a cycle
    - data ids are unique within the datamodel

    Raises:
        ValidationError: the first violation found
    """
    ids = collect_ids(document.states)
    check_targets(document.states, ids)

    if document.initial is not None:
        _resolve_reference(document.initial, ids)
    logger.debug("Root initial resolved: %s", document.initial)

    check_initial_cycles(document.states)
    check_datamodel(document.data)


def collect_ids(states: Iterable[model.StateLike]) -> Set[str]:
    """Collect state ids, raising DuplicateId on the first repeat."""
    ids: Set[str] = set()
    for node in iter_states(states):
        if node.id is None:
            continue
        if node.id in ids:
            raise DuplicateId(node.id)
        ids.add(node.id)
    logger.debug("Collected %d state ids", len(ids))
    return ids


def check_targets(states: Iterable[model.StateLike], ids: Set[str]) -> None:
    """Every target token of every transition must name a declared state."""
    for node in iter_states(states):
        if isinstance(node, model.State):
            if node.initial is not None:
                _resolve_reference(node.initial, ids)
            if node.initial_element is not None:
                targets = node.initial_element.transition.targets
                if not targets:
                    raise MissingElement("initial transition target")
                _resolve(targets, ids)

        for transition in model.node_transitions(node):
            _resolve(transition.targets, ids)
    logger.debug("All transition targets resolved")


def check_initial_cycles(states: Iterable[model.StateLike]) -> None:
    """
    Follow initial references from every state and reject loops

    A state's initial attribute and its <initial> transition target both
    count as edges. A chain that comes back to a state already on it
    raises CircularInitial with the offending chain.
    """
    edges: Dict[str, List[str]] = {}
    for node in iter_states(states):
        if not isinstance(node, model.State) or node.id is None:
            continue
        refs = node.initial.split() if node.initial else []
        if node.initial_element is not None:
            refs.extend(node.initial_element.transition.targets)
        if refs:
            edges[node.id] = refs

    done: Set[str] = set()
    for start in edges:
        if start in done:
            continue
        path = [start]
        on_path = {start}
        pending = [iter(edges[start])]
        while pending:
            ref = next(pending[-1], None)
            if ref is None:
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                pending.pop()
                continue
            if ref in on_path:
                raise CircularInitial(path[path.index(ref):] + [ref])
            if ref in done or ref not in edges:
                continue
            path.append(ref)
            on_path.add(ref)
            pending.append(iter(edges[ref]))
    logger.debug("No circular initial references")


def check_datamodel(data: Iterable[model.DataItem]) -> None:
    """Data ids must be non-empty and unique within the datamodel."""
    seen: Set[str] = set()
    for item in data:
        if not item.id.strip():
            raise InvalidDatamodel("data id must not be empty")
        if item.id in seen:
            raise DuplicateId(item.id)
        seen.add(item.id)
    # Empty data elements are legal (late binding); expr/src/content are not required
    logger.debug("Datamodel ok: %d items", len(seen))


def _resolve(targets: Iterable[str], ids: Set[str]) -> None:
    for target in targets:
        if target not in ids:
            raise InvalidTarget(target)


def _resolve_reference(value: str, ids: Set[str]) -> None:
    """A declared initial reference must name at least one state."""
    tokens = value.split()
    if not tokens:
        raise InvalidTarget(value)
    _resolve(tokens, ids)
