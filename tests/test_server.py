import time
import unittest

from server import build_host, create_app


class ServerTests(unittest.TestCase):
    def setUp(self):
        self.host = build_host(player_side="white", use_random=True).start()
        self.client = create_app(self.host).test_client()

    def tearDown(self):
        self.host.stop()

    def test_initial_projection(self):
        rsp = self.client.get("/api/session")
        self.assertEqual(rsp.status_code, 200)
        data = rsp.get_json()
        self.assertEqual(data["session"]["state"], "player_turn")
        self.assertEqual(data["session"]["cursor"]["square"], "e2")
        self.assertEqual(data["camera"]["mode"], "centered")
        self.assertEqual(rsp.headers["Cache-Control"], "no-store, max-age=0")

    def test_cursor_and_selection_inputs(self):
        data = self.client.post("/api/session/input", json={"key": "w"}).get_json()
        self.assertEqual(data["session"]["cursor"]["square"], "e3")
        self.client.post("/api/session/input", json={"action": "down"})
        data = self.client.post("/api/session/input", json={"key": "space"}).get_json()
        self.assertEqual(data["session"]["selection"], "e2")
        self.assertEqual(data["session"]["destinations"], ["e3", "e4"])

    def test_player_move_gets_an_answer(self):
        self.client.post("/api/session/input", json={"action": "confirm"})
        self.client.post("/api/session/input", json={"key": "w"})
        self.client.post("/api/session/input", json={"key": "w"})
        data = self.client.post("/api/session/input", json={"key": "enter"}).get_json()
        self.assertEqual(data["session"]["last_move"], {"from": "e2", "to": "e4"})
        deadline = time.time() + 5
        while data["session"]["state"] != "player_turn" and time.time() < deadline:
            time.sleep(0.01)
            data = self.client.get("/api/session").get_json()
        self.assertEqual(data["session"]["state"], "player_turn")
        self.assertEqual(data["session"]["turn"], "white")

    def test_reset_to_black(self):
        data = self.client.post("/api/session/reset", json={"player_side": "black"}).get_json()
        self.assertEqual(data["session"]["player_side"], "black")
        self.assertEqual(data["session"]["cursor"]["square"], "e7")
        self.assertEqual(data["camera"]["camera_position"], [0.0, 8.0, 8.0])

    def test_camera_mode(self):
        data = self.client.post("/api/session/camera", json={"mode": "follow"}).get_json()
        self.assertEqual(data["camera"]["mode"], "follow")
        self.assertEqual(self.client.get("/api/camera").get_json()["mode"], "follow")

    def test_manual_orbit(self):
        data = self.client.post("/api/camera/orbit", json={"position": [3, 5, -6]}).get_json()
        self.assertEqual(data["camera_position"], [3.0, 5.0, -6.0])
        self.assertEqual(self.client.get("/api/camera").get_json()["camera_position"], [3.0, 5.0, -6.0])
        self.assertEqual(self.client.post("/api/camera/orbit", json={"target": [1, 2]}).status_code, 400)
        self.assertEqual(self.client.post("/api/camera/orbit", json={"target": ["a", 0, 0]}).status_code, 400)

    def test_bad_requests(self):
        self.assertEqual(self.client.post("/api/session/input", json={"key": "q"}).status_code, 400)
        self.assertEqual(self.client.post("/api/session/reset", json={"player_side": "green"}).status_code, 400)
        self.assertEqual(self.client.post("/api/session/camera", json={"mode": "drone"}).status_code, 400)

    def test_preflight(self):
        rsp = self.client.options("/api/session/input", headers={"Origin": "http://localhost:5173"})
        self.assertIn(rsp.status_code, (200, 204))
        self.assertEqual(rsp.headers["Access-Control-Allow-Origin"], "http://localhost:5173")


if __name__ == "__main__":
    unittest.main()
