"""
familyvault/flow/view.py

Purpose: Rendering surface used by the controllers

- Element trees built node by node (text is always text)
- HTML serialisation that escapes every text node and attribute
- Surface protocol: regions, modal, alerts, prompts, busy flags,
  downloads, object URLs and a gesture event bus
- MemorySurface: headless implementation for the CLI and tests
"""

import asyncio
import html
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Protocol, Tuple, Union

VOID_TAGS = {"img", "input", "br", "hr", "meta", "link"}

EventHandler = Callable[..., Awaitable[None]]


class Element:
    """
    A node in a rendered tree.
    """

    def __init__(self, tag: str, attrs: Optional[Dict[str, str]] = None, children: Optional[List["Node"]] = None):
        self.tag = tag
        self.attrs = attrs or {}
        self.children: List[Node] = children or []

    def __repr__(self):
        return f"<Element {self.tag} {self.attrs}>"

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    @property
    def classes(self) -> List[str]:
        return self.attrs.get("class", "").split()

    def text(self) -> str:
        """Concatenated text content of the subtree."""
        parts = []
        for child in self.children:
            parts.append(child.text() if isinstance(child, Element) else child)
        return "".join(parts)

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    def find_all(self, tag: Optional[str] = None, class_name: Optional[str] = None, **attrs) -> List["Element"]:
        """
        Finds descendant elements (self included) matching every criterion.
        Attribute names use underscores for hyphens (data_id -> data-id).
        """
        wanted = {_attr_name(k): str(v) for k, v in attrs.items()}
        found = []
        for node in self.iter():
            if tag is not None and node.tag != tag:
                continue
            if class_name is not None and class_name not in node.classes:
                continue
            if any(node.attrs.get(k) != v for k, v in wanted.items()):
                continue
            found.append(node)
        return found

    def find(self, tag: Optional[str] = None, class_name: Optional[str] = None, **attrs) -> Optional["Element"]:
        matches = self.find_all(tag, class_name, **attrs)
        return matches[0] if matches else None

    def to_html(self) -> str:
        attrs = "".join(
            f' {html.escape(name, quote=True)}="{html.escape(str(value), quote=True)}"'
            for name, value in self.attrs.items()
        )
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        inner = "".join(
            child.to_html() if isinstance(child, Element) else html.escape(child, quote=True)
            for child in self.children
        )
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


Node = Union[Element, str]


def _attr_name(name: str) -> str:
    return name.rstrip("_").replace("_", "-")


def _flatten(children) -> List[Node]:
    nodes: List[Node] = []
    for child in children:
        if child is None or child is False:
            continue
        if isinstance(child, (list, tuple)):
            nodes.extend(_flatten(child))
        elif isinstance(child, Element):
            nodes.append(child)
        else:
            nodes.append(str(child))
    return nodes


def el(tag: str, *children: Any, **attrs: Any) -> Element:
    """
    Builds an element.

    Example:
        el("div", el("h3", doc.title), class_="document-card", data_id=doc.id)

    Children may be elements, strings, numbers, None (skipped) or nested lists.
    Attributes with a None value are dropped.
    """
    attributes = {_attr_name(k): str(v) for k, v in attrs.items() if v is not None}
    return Element(tag, attributes, _flatten(children))


@dataclass
class Alert:
    id: int
    message: str
    kind: str = "info"  # success | error | info


class Surface(Protocol):
    """
    What the controllers need from the host page.
    """

    def show_screen(self, screen: str) -> None: ...

    def show_section(self, section: str) -> None: ...

    def render(self, region: str, content: Optional[Element]) -> None: ...

    def show_modal(self, content: Element) -> None: ...

    def close_modal(self) -> None: ...

    def alert(self, message: str, kind: str = "info") -> Alert: ...

    async def confirm(self, message: str) -> bool: ...

    def set_busy(self, control: str, busy: bool) -> None: ...

    def reset_form(self, form: str) -> None: ...

    def save_download(self, filename: str, content: bytes) -> None: ...

    def create_object_url(self, content: bytes, content_type: Optional[str]) -> str: ...

    def revoke_object_url(self, url: str) -> None: ...

    def listen(self, event: str, handler: EventHandler) -> Callable[[], None]: ...

    async def dispatch(self, event: str, **payload: Any) -> None: ...


class MemorySurface:
    """
    Headless surface that keeps everything in memory.

    `history` records modal and object-URL operations in order, which is
    how callers can check that a URL is revoked before its modal goes away.
    """

    def __init__(self, logger: logging.Logger, alert_dismiss_seconds: Optional[float] = 5.0):
        self.logger = logger
        self.alert_dismiss_seconds = alert_dismiss_seconds
        self.screen: Optional[str] = None
        self.section: Optional[str] = None
        self.regions: Dict[str, Optional[Element]] = {}
        self.modal: Optional[Element] = None
        self.alerts: List[Alert] = []
        self.alert_log: List[Alert] = []
        self.prompts: List[str] = []
        self.confirm_answers: List[bool] = []
        self.default_confirm = True
        self.busy: Dict[str, bool] = {}
        self.busy_log: List[Tuple[str, bool]] = []
        self.form_resets: List[str] = []
        self.downloads: List[Tuple[str, bytes]] = []
        self.object_urls: Dict[str, Tuple[bytes, Optional[str]]] = {}
        self.minted_urls: List[str] = []
        self.revoked_urls: List[str] = []
        self.history: List[Tuple[str, ...]] = []
        self._listeners: Dict[str, List[EventHandler]] = {}
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Screens and regions
    # ------------------------------------------------------------------

    def show_screen(self, screen: str):
        self.screen = screen

    def show_section(self, section: str):
        self.section = section

    def render(self, region: str, content: Optional[Element]):
        self.regions[region] = content

    def region(self, name: str) -> Optional[Element]:
        return self.regions.get(name)

    def region_text(self, name: str) -> str:
        content = self.regions.get(name)
        return content.text() if content is not None else ""

    def show_modal(self, content: Element):
        self.modal = content
        self.history.append(("modal_open",))

    def close_modal(self):
        if self.modal is not None:
            self.modal = None
            self.history.append(("modal_close",))

    # ------------------------------------------------------------------
    # Alerts and prompts
    # ------------------------------------------------------------------

    def alert(self, message: str, kind: str = "info") -> Alert:
        alert = Alert(id=next(self._ids), message=message, kind=kind)
        self.alerts.append(alert)
        self.alert_log.append(alert)
        log = self.logger.error if kind == "error" else self.logger.info
        log(f"[{kind}] {message}")

        if self.alert_dismiss_seconds:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                loop.call_later(self.alert_dismiss_seconds, self.dismiss_alert, alert.id)
        return alert

    def dismiss_alert(self, alert_id: int):
        self.alerts = [a for a in self.alerts if a.id != alert_id]

    def last_alert(self) -> Optional[Alert]:
        return self.alert_log[-1] if self.alert_log else None

    async def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        if self.confirm_answers:
            return self.confirm_answers.pop(0)
        return self.default_confirm

    # ------------------------------------------------------------------
    # Forms and controls
    # ------------------------------------------------------------------

    def set_busy(self, control: str, busy: bool):
        self.busy[control] = busy
        self.busy_log.append((control, busy))

    def reset_form(self, form: str):
        self.form_resets.append(form)

    # ------------------------------------------------------------------
    # Downloads and object URLs
    # ------------------------------------------------------------------

    def save_download(self, filename: str, content: bytes):
        self.downloads.append((filename, content))

    def create_object_url(self, content: bytes, content_type: Optional[str]) -> str:
        url = f"blob:familyvault/{next(self._ids)}"
        self.object_urls[url] = (content, content_type)
        self.minted_urls.append(url)
        self.history.append(("url_create", url))
        return url

    def revoke_object_url(self, url: str):
        self.object_urls.pop(url, None)
        self.revoked_urls.append(url)
        self.history.append(("url_revoke", url))

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def listen(self, event: str, handler: EventHandler) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(handler)

        def unsubscribe():
            handlers = self._listeners.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    async def dispatch(self, event: str, **payload: Any):
        """Delivers a user gesture to its handlers in registration order."""
        for handler in list(self._listeners.get(event, [])):
            await handler(**payload)


def placeholder(message: str, kind: str = "empty", hint: Optional[str] = None) -> Element:
    """Inline empty / error / loading block rendered into a region."""
    return el("div", el("p", message), el("p", hint, class_="hint") if hint else None, class_=f"{kind}-state")
