import unittest

from mcp_chat.state import (
    UiState,
    UiStateStore,
    select_model,
    set_panel,
    toggle_dark_mode,
    toggle_panel,
)


class UiTransitionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = UiState(selected_model_id="claude-4-sonnet", model_dropdown_open=True)

    def test_select_model_closes_dropdown_without_mutating_input(self) -> None:
        updated = select_model(self.state, "gpt-4-turbo")

        self.assertEqual(updated.selected_model_id, "gpt-4-turbo")
        self.assertFalse(updated.model_dropdown_open)
        self.assertEqual(self.state.selected_model_id, "claude-4-sonnet")
        self.assertTrue(self.state.model_dropdown_open)

    def test_toggle_dark_mode(self) -> None:
        self.assertTrue(self.state.dark_mode)
        self.assertFalse(toggle_dark_mode(self.state).dark_mode)
        self.assertTrue(toggle_dark_mode(toggle_dark_mode(self.state)).dark_mode)

    def test_panels(self) -> None:
        for panel in ("history", "settings", "model_dropdown"):
            with self.subTest(panel=panel):
                opened = set_panel(self.state, panel, True)
                self.assertTrue(opened.is_open(panel))
                self.assertEqual(toggle_panel(toggle_panel(opened, panel), panel), opened)


class UiStateStoreTests(unittest.TestCase):
    def test_dispatch_notifies_subscribers_on_change_only(self) -> None:
        store = UiStateStore(UiState(selected_model_id="claude-4-sonnet"))
        seen: list[UiState] = []
        unsubscribe = store.subscribe(seen.append)

        store.dispatch(toggle_panel, "settings")
        store.dispatch(set_panel, "settings", True)
        store.dispatch(select_model, "claude-4-opus")

        self.assertEqual(len(seen), 2)
        self.assertTrue(seen[0].settings_open)
        self.assertEqual(store.state.selected_model_id, "claude-4-opus")

        unsubscribe()
        store.dispatch(toggle_dark_mode)
        self.assertEqual(len(seen), 2)
        self.assertFalse(store.state.dark_mode)


if __name__ == "__main__":
    unittest.main()
