"""
SCXML grammar parser

Walks an element tree under the W3C SCXML 1.0 grammar and builds an
immutable Document. Referential checks (ids, targets) are left to the
validator; the parser only enforces structure and required attributes.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from . import model
from .element import Element, load
from .errors import InvalidNamespace, InvalidStructure, MissingAttribute

logger = logging.getLogger(__name__)

# W3C SCXML namespace
SCXML_NAMESPACE = "http://www.w3.org/2005/07/scxml"
SCXML_VERSION = "1.0"

STATE_LIKE_TAGS = ("state", "parallel", "final", "history")
HISTORY_TYPES = ("shallow", "deep")


@dataclass(frozen=True)
class ParseOptions:
    """Parser configuration"""
    relaxed_namespace: bool = False  # accept a missing or foreign root namespace
    max_depth: int = 128  # element nesting below <scxml>


class SCXMLParser:
    """
    W3C SCXML 1.0 grammar parser

    Builds a Document from an Element. Parsing is fail-fast: the first
    structural violation raises a ParseError and no partial tree is
    returned.
    """

    def __init__(self, options: Optional[ParseOptions] = None):
        self.options = options or ParseOptions()

    def parse(self, root: Element) -> model.Document:
        """
        Parse the <scxml> root element

        Args:
            root: Element (or bare lxml element) of the document root

        Returns:
            Document with the full state hierarchy
        """
        if not isinstance(root, Element):
            root = Element(root)

        if root.tag_name() != "scxml":
            raise InvalidStructure("Root must be <scxml>")

        if not self.options.relaxed_namespace and root.namespace() != SCXML_NAMESPACE:
            raise InvalidNamespace(SCXML_NAMESPACE)

        version = root.attribute("version")
        if version is None:
            raise MissingAttribute("version")
        if version != SCXML_VERSION:
            raise InvalidStructure(f"SCXML version must be {SCXML_VERSION}")

        states: List[model.StateLike] = []
        data: List[model.DataItem] = []
        scripts: List[model.Script] = []

        for child in root.children():
            tag = child.tag_name()
            if tag in STATE_LIKE_TAGS:
                states.append(self._parse_state_like(child, 1))
            elif tag == "datamodel":
                data.extend(self._parse_datamodel(child, 1))
            elif tag == "script":
                # W3C SCXML 5.8: global scripts
                scripts.append(self._parse_script(child))
            else:
                logger.debug("Skipping unsupported top-level element <%s>", tag)

        document = model.Document(
            version=version,
            initial=root.attribute("initial"),
            datamodel_type=root.attribute("datamodel"),
            name=root.attribute("name"),
            binding=root.attribute("binding"),
            states=tuple(states),
            data=tuple(data),
            scripts=tuple(scripts),
        )
        logger.debug(
            "Parsed SCXML document: %d top-level states, %d data items",
            len(document.states), len(document.data),
        )
        return document

    def _enter(self, elem: Element, depth: int) -> None:
        if depth > self.options.max_depth:
            raise InvalidStructure(
                f"<{elem.tag_name()}> nested deeper than {self.options.max_depth} levels"
            )

    def _parse_state_like(self, elem: Element, depth: int) -> model.StateLike:
        tag = elem.tag_name()
        if tag == "state":
            return self._parse_state(elem, depth)
        if tag == "parallel":
            return self._parse_parallel(elem, depth)
        if tag == "final":
            return self._parse_final(elem, depth)
        if tag == "history":
            return self._parse_history(elem, depth)
        raise InvalidStructure(f"<{tag}> is not a state-like element")

    def _parse_state(self, elem: Element, depth: int) -> model.State:
        """Parse <state> (W3C SCXML 3.3)"""
        self._enter(elem, depth)
        initial_element = None
        transitions = []
        onentry = []
        onexit = []
        children = []
        invokes = []

        for child in elem.children():
            tag = child.tag_name()
            if tag == "initial":
                initial_element = self._parse_initial(child, depth + 1)
            elif tag == "transition":
                transitions.append(self._parse_transition(child, depth + 1))
            elif tag == "onentry":
                onentry.extend(self._parse_executables(child, depth + 1))
            elif tag == "onexit":
                onexit.extend(self._parse_executables(child, depth + 1))
            elif tag in STATE_LIKE_TAGS:
                children.append(self._parse_state_like(child, depth + 1))
            elif tag == "invoke":
                invokes.append(self._parse_invoke(child, depth + 1))

        return model.State(
            id=elem.attribute("id"),
            initial=elem.attribute("initial"),
            initial_element=initial_element,
            transitions=tuple(transitions),
            onentry=tuple(onentry),
            onexit=tuple(onexit),
            children=tuple(children),
            invokes=tuple(invokes),
        )

    def _parse_parallel(self, elem: Element, depth: int) -> model.Parallel:
        """Parse <parallel> (W3C SCXML 3.4)"""
        self._enter(elem, depth)
        transitions = []
        onentry = []
        onexit = []
        children = []
        invokes = []

        for child in elem.children():
            tag = child.tag_name()
            if tag == "transition":
                transitions.append(self._parse_transition(child, depth + 1))
            elif tag == "onentry":
                onentry.extend(self._parse_executables(child, depth + 1))
            elif tag == "onexit":
                onexit.extend(self._parse_executables(child, depth + 1))
            elif tag in STATE_LIKE_TAGS:
                children.append(self._parse_state_like(child, depth + 1))
            elif tag == "invoke":
                invokes.append(self._parse_invoke(child, depth + 1))

        return model.Parallel(
            id=elem.attribute("id"),
            transitions=tuple(transitions),
            onentry=tuple(onentry),
            onexit=tuple(onexit),
            children=tuple(children),
            invokes=tuple(invokes),
        )

    def _parse_final(self, elem: Element, depth: int) -> model.Final:
        """Parse <final> (W3C SCXML 3.7)"""
        self._enter(elem, depth)
        onentry = []
        onexit = []
        donedata = None

        for child in elem.children():
            tag = child.tag_name()
            if tag == "onentry":
                onentry.extend(self._parse_executables(child, depth + 1))
            elif tag == "onexit":
                onexit.extend(self._parse_executables(child, depth + 1))
            elif tag == "donedata":
                donedata = self._parse_donedata(child, depth + 1)

        return model.Final(
            id=elem.attribute("id"),
            onentry=tuple(onentry),
            onexit=tuple(onexit),
            donedata=donedata,
        )

    def _parse_history(self, elem: Element, depth: int) -> model.History:
        """Parse <history> (W3C SCXML 3.11)"""
        self._enter(elem, depth)
        history_type = elem.attribute("type") or "shallow"
        if history_type not in HISTORY_TYPES:
            raise InvalidStructure(f"History type must be shallow or deep, got {history_type!r}")

        # Use first transition as default
        transition = None
        for child in elem.children():
            if child.tag_name() == "transition":
                transition = self._parse_transition(child, depth + 1)
                break

        return model.History(id=elem.attribute("id"), type=history_type, transition=transition)

    def _parse_initial(self, elem: Element, depth: int) -> model.Initial:
        """Parse <initial> (W3C SCXML 3.6)"""
        self._enter(elem, depth)
        for child in elem.children():
            if child.tag_name() == "transition":
                return model.Initial(
                    id=elem.attribute("id"),
                    transition=self._parse_transition(child, depth + 1),
                )
        raise InvalidStructure("Initial must have a transition")

    def _parse_transition(self, elem: Element, depth: int) -> model.Transition:
        """Parse <transition> (W3C SCXML 3.5)"""
        self._enter(elem, depth)
        return model.Transition(
            event=elem.attribute("event"),
            cond=elem.attribute("cond"),
            target=elem.attribute("target"),
            type=elem.attribute("type"),
            executables=tuple(self._parse_executables(elem, depth)),
        )

    def _parse_invoke(self, elem: Element, depth: int) -> model.Invoke:
        """Parse <invoke> (W3C SCXML 6.4)"""
        self._enter(elem, depth)
        params = []
        finalize = None
        content = None

        for child in elem.children():
            tag = child.tag_name()
            if tag == "param":
                params.append(self._parse_param(child))
            elif tag == "finalize":
                finalize = model.Finalize(tuple(self._parse_executables(child, depth + 1)))
            elif tag == "content":
                content = self._parse_content(child)

        return model.Invoke(
            type=elem.attribute("type") or "",
            src=elem.attribute("src"),
            id=elem.attribute("id"),
            srcexpr=elem.attribute("srcexpr"),
            idlocation=elem.attribute("idlocation"),
            autoforward=elem.attribute("autoforward"),
            namelist=elem.attribute("namelist"),
            params=tuple(params),
            finalize=finalize,
            content=content,
        )

    def _parse_donedata(self, elem: Element, depth: int) -> model.DoneData:
        """Parse <donedata> (W3C SCXML 5.5)"""
        self._enter(elem, depth)
        params = []
        content = None
        for child in elem.children():
            tag = child.tag_name()
            if tag == "param":
                params.append(self._parse_param(child))
            elif tag == "content":
                content = self._parse_content(child)
        return model.DoneData(params=tuple(params), content=content)

    def _parse_param(self, elem: Element) -> model.Param:
        name = elem.attribute("name")
        if name is None:
            raise MissingAttribute("param name")
        return model.Param(name=name, expr=elem.attribute("expr"), location=elem.attribute("location"))

    def _parse_content(self, elem: Element) -> model.Content:
        return model.Content(expr=elem.attribute("expr"), body=self._inline_text(elem))

    def _inline_text(self, elem: Element) -> Optional[str]:
        # Only the leading text is kept; inline markup is not modelled
        dropped = [child.tag_name() for child in elem.children()]
        if dropped:
            logger.debug(
                "Discarding inline markup in <%s>: %s",
                elem.tag_name(), ", ".join(f"<{tag}>" for tag in dropped),
            )
        return elem.text()

    def _parse_script(self, elem: Element) -> model.Script:
        return model.Script(src=elem.attribute("src"), content=elem.text())

    def _parse_datamodel(self, elem: Element, depth: int) -> List[model.DataItem]:
        """Parse <datamodel> (W3C SCXML 5.2)"""
        self._enter(elem, depth)
        items = []
        for child in elem.children():
            if child.tag_name() != "data":
                continue
            data_id = child.attribute("id")
            if data_id is None:
                raise MissingAttribute("data id")
            items.append(model.DataItem(
                id=data_id,
                expr=child.attribute("expr"),
                src=child.attribute("src"),
                content=self._inline_text(child),
            ))
        return items

    def _parse_executables(self, elem: Element, depth: int) -> List[model.Executable]:
        """Parse every child of a container as executable content"""
        return [self._parse_executable(child, depth + 1) for child in elem.children()]

    def _parse_executable(self, elem: Element, depth: int) -> model.Executable:
        """
        Parse one executable element

        Handles: raise, if, foreach, send, script, assign, log, cancel.
        Anything else is kept as Other so that unknown content survives.
        """
        self._enter(elem, depth)
        tag = elem.tag_name()

        if tag == "raise":
            return model.Raise(event=elem.attribute("event") or "")

        if tag == "if":
            # Children before the first <else/> are the "then" branch,
            # the rest belong to "else"
            then: List[model.Executable] = []
            else_: List[model.Executable] = []
            current = then
            for child in elem.children():
                if child.tag_name() == "else":
                    current = else_
                    continue
                current.append(self._parse_executable(child, depth + 1))
            return model.If(cond=elem.attribute("cond") or "", then=tuple(then), else_=tuple(else_))

        if tag == "foreach":
            return model.Foreach(
                array=elem.attribute("array") or "",
                item=elem.attribute("item") or "",
                index=elem.attribute("index"),
                body=tuple(self._parse_executables(elem, depth)),
            )

        if tag == "send":
            params = []
            content = None
            for child in elem.children():
                child_tag = child.tag_name()
                if child_tag == "param":
                    params.append(self._parse_param(child))
                elif child_tag == "content" and content is None:
                    content = self._parse_content(child)
            return model.Send(
                event=elem.attribute("event") or "",
                target=elem.attribute("target"),
                eventexpr=elem.attribute("eventexpr"),
                targetexpr=elem.attribute("targetexpr"),
                type=elem.attribute("type"),
                id=elem.attribute("id"),
                idlocation=elem.attribute("idlocation"),
                delay=elem.attribute("delay"),
                delayexpr=elem.attribute("delayexpr"),
                namelist=elem.attribute("namelist"),
                params=tuple(params),
                content=content,
            )

        if tag == "script":
            return self._parse_script(elem)

        if tag == "assign":
            return model.Assign(
                location=elem.attribute("location") or "",
                expr=elem.attribute("expr") or "",
            )

        if tag == "log":
            return model.Log(label=elem.attribute("label"), expr=elem.attribute("expr") or "")

        if tag == "cancel":
            return model.Cancel(
                sendid=elem.attribute("sendid") or "",
                sendidexpr=elem.attribute("sendidexpr"),
            )

        logger.debug("Keeping unsupported executable element <%s>", tag)
        return model.Other(tag)


def parse(root: Element, options: Optional[ParseOptions] = None) -> model.Document:
    """Parse an element tree rooted at <scxml> into a Document."""
    return SCXMLParser(options).parse(root)


def parse_string(source: Union[str, bytes], options: Optional[ParseOptions] = None) -> model.Document:
    """Tokenize XML text with lxml and parse it into a Document."""
    return parse(load(source), options)
