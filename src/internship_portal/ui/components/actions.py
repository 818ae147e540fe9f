"""Forms for actions that need a written justification."""

from __future__ import annotations

from typing import Callable, List, Optional

import solara

from internship_portal.state.listing import is_justified


@solara.component
def JustifiedActionForm(
    label: str,
    value: str,
    on_value: Callable[[str], None],
    on_submit: Callable[[], None],
    on_cancel: Callable[[], None],
    submit_label: str = "Submit",
    color: str = "primary",
    pending: bool = False,
    prompt: Optional[str] = None,
    children: List[solara.Element] = [],
) -> None:
    """Textarea plus submit/cancel buttons.

    Submit stays disabled until the text has non-whitespace content and
    while the request is in flight.
    """

    with solara.Column(style={"gap": "0.75rem"}):
        if prompt:
            solara.Text(prompt)
        solara.Column(children=children)
        solara.InputTextArea(
            label,
            value=value,
            on_value=on_value,
            continuous_update=True,
            rows=4,
        )
        with solara.Row(classes=["ip-modal__footer"]):
            solara.Button("Cancel", text=True, on_click=on_cancel, disabled=pending)
            solara.Button(
                "Submitting..." if pending else submit_label,
                color=color,
                on_click=on_submit,
                disabled=pending or not is_justified(value),
            )


@solara.component
def ConfirmActions(
    on_confirm: Callable[[], None],
    on_cancel: Callable[[], None],
    confirm_label: str = "Confirm",
    color: str = "primary",
    pending: bool = False,
) -> None:
    with solara.Row(classes=["ip-modal__footer"]):
        solara.Button("Cancel", text=True, on_click=on_cancel, disabled=pending)
        solara.Button(
            "Working..." if pending else confirm_label,
            color=color,
            on_click=on_confirm,
            disabled=pending,
        )
