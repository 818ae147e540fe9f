from internship_portal.state.modal import ModalManager, ScrollLock, modal_width


def test_closing_a_modal_closes_everything_above_it():
    modals = ModalManager()
    modals.open("detail", title="Report", size="lg")
    modals.open("action", title="Resolve")
    modals.open("confirm")

    modals.close("action")

    assert [entry.modal_id for entry in modals.stack.value] == ["detail"]
    assert modals.is_top("detail")


def test_open_is_idempotent_and_only_top_is_interactive():
    modals = ModalManager()
    modals.open("detail")
    modals.open("action")
    modals.open("detail")

    assert modals.depth("detail") == 0
    assert modals.depth("action") == 1
    assert modals.top.modal_id == "action"
    assert not modals.is_top("detail")
    assert modals.dismiss_top().modal_id == "action"
    modals.close_all()
    assert modals.top is None


def test_scroll_lock_is_held_until_last_lease_is_released():
    lock = ScrollLock()
    outer = lock.acquire()
    inner = lock.acquire()
    assert lock.count.value == 2

    inner.release()
    inner.release()
    assert lock.locked

    outer.release()
    assert not lock.locked
    assert lock.count.value == 0


def test_modal_widths():
    assert modal_width("sm") == 448
    assert modal_width("xl") == 896
    assert modal_width("huge") == 512
