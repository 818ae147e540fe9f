"""Modal dialog shared by every tab, plus the page scroll lock style."""

from __future__ import annotations

from typing import Callable, List, Optional

import solara

from internship_portal.state.modal import ModalManager, ScrollLock, modal_width

SCROLL_LOCK_CSS = "html, body { overflow: hidden !important; }"


@solara.component
def ScrollLockStyle(lock: ScrollLock) -> None:
    """Freeze page scrolling while any modal holds a lease."""

    if lock.count.value > 0:
        solara.Style(SCROLL_LOCK_CSS)


@solara.component
def Modal(
    is_open: bool,
    on_close: Callable[[], None],
    title: Optional[str] = None,
    children: List[solara.Element] = [],
    size: str = "md",
    show_close_button: bool = True,
    scroll_lock: Optional[ScrollLock] = None,
    interactive: bool = True,
):
    """Centered dialog over a dimmed backdrop.

    Clicking the backdrop or the close button calls ``on_close``; clicks
    inside the panel never do. A modal that is not ``interactive`` (one
    covered by another modal) ignores backdrop clicks.
    """

    def hold_scroll_lock():
        if not is_open or scroll_lock is None:
            return None
        lease = scroll_lock.acquire()
        return lease.release

    solara.use_effect(hold_scroll_lock, [is_open, scroll_lock])

    if not is_open:
        return

    def handle_v_model(value: bool) -> None:
        if not value and interactive:
            on_close()

    with solara.v.Dialog(
        v_model=True,
        on_v_model=handle_v_model,
        max_width=modal_width(size),
        persistent=not interactive,
        scrollable=True,
    ):
        with solara.v.Card(class_=f"ip-modal ip-modal--{size}"):
            if title:
                with solara.v.CardTitle(class_="ip-modal__header"):
                    solara.Text(title)
                    if show_close_button:
                        solara.Button(
                            icon_name="mdi-close",
                            icon=True,
                            on_click=on_close,
                            classes=["ip-modal__close"],
                        )
            elif show_close_button:
                solara.Button(
                    icon_name="mdi-close",
                    icon=True,
                    on_click=on_close,
                    classes=["ip-modal__close", "ip-modal__close--floating"],
                )
            with solara.v.CardText(class_="ip-modal__body"):
                solara.Column(children=children)


@solara.component
def StackedModal(
    manager: ModalManager,
    modal_id: str,
    on_close: Callable[[], None],
    children: List[solara.Element] = [],
    scroll_lock: Optional[ScrollLock] = None,
    show_close_button: bool = True,
):
    """Render ``modal_id`` from ``manager``; only the top of the stack takes backdrop clicks."""

    stack = manager.stack.value
    descriptor = next((entry for entry in stack if entry.modal_id == modal_id), None)
    Modal(
        is_open=descriptor is not None,
        on_close=on_close,
        title=descriptor.title if descriptor else None,
        children=children,
        size=descriptor.size if descriptor else "md",
        show_close_button=show_close_button,
        scroll_lock=scroll_lock,
        interactive=bool(stack) and stack[-1].modal_id == modal_id,
    )
