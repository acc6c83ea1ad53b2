"""
Tests for the live search websocket.
"""

from rentfinder.schemas.listing import ListingPage


class TestSearchSocket:
    """Tests for the search session protocol."""

    def test_initial_state(self, app_client):
        """The first frame carries the panel and the server-rendered grid."""
        with app_client.websocket_connect("/ws/search") as ws:
            state = ws.receive_json()

        assert state["type"] == "state"
        assert state["loading"] is False
        assert state["grid"]["state"] == "content"
        assert state["grid"]["count"] == 1
        assert "Lake View Residency" in state["grid"]["html"]
        assert state["panel"]["locations"] == ["Hitech city", "Madhapur", "Gachibowli", "Kondapur"]
        assert state["panel"]["bhk_options"] == ["1RK", "1BHK", "2BHK", "3BHK", "4BHK"]

    def test_chip_toggle_fetches_after_debounce(self, app_client, api_client_mock):
        """A chip change is echoed at once, then fetched after the debounce."""
        with app_client.websocket_connect("/ws/search") as ws:
            ws.receive_json()
            api_client_mock.get_properties.return_value = ListingPage(results=[])

            ws.send_json({"action": "toggle_bhk", "value": "2BHK"})
            echoed = ws.receive_json()
            loading = ws.receive_json()
            done = ws.receive_json()

        assert echoed["panel"]["selected_bhk_types"] == ["2BHK"]
        assert echoed["grid"]["state"] == "content"
        assert loading["loading"] is True
        assert done["grid"]["state"] == "empty"
        assert "No properties found matching your criteria." in done["grid"]["html"]
        api_client_mock.get_properties.assert_awaited_with(
            location="", bhk_types=["2BHK"], page=1, limit=12
        )

    def test_invalid_search_reports_error(self, app_client, api_client_mock):
        """A rejected search term comes back as a panel error without a fetch."""
        with app_client.websocket_connect("/ws/search") as ws:
            ws.receive_json()
            ws.send_json({"action": "search_input", "value": "x"})
            ws.receive_json()
            ws.send_json({"action": "search_submit"})
            state = ws.receive_json()

        assert state["panel"]["search_error"] == "Search term must be at least 2 characters long"
        assert api_client_mock.get_properties.await_count == 1

    def test_rejects_malformed_messages(self, app_client):
        """Bad frames get an error reply and keep the session open."""
        with app_client.websocket_connect("/ws/search") as ws:
            ws.receive_json()

            ws.send_text("not json")
            assert ws.receive_json() == {"type": "error", "message": "Messages must be JSON"}

            ws.send_json(["toggle_bhk"])
            assert ws.receive_json() == {"type": "error", "message": "Messages must be objects"}

            ws.send_json({"action": "explode"})
            assert ws.receive_json() == {"type": "error", "message": "Unknown action: explode"}

            ws.send_json({"action": "toggle_bhk", "value": 2})
            assert ws.receive_json() == {
                "type": "error",
                "message": "'toggle_bhk' needs a string value",
            }
