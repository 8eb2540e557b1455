"""API tests for the stateless step/diagram endpoints."""

import json


class TestParseEndpoint:
    def test_parse_text(self, client):
        body = client.post("/api/flow/parse", json={"text": "1. A\nnote\n2. B\n4. D"}).get_json()
        assert [s["id"] for s in body["steps"]] == ["1", "2", "3", "4"]
        assert body["steps"][0]["details"] == ["note"]
        assert len(body["nodes"]) == 4
        assert len(body["edges"]) == 3
        assert body["duplicates"] == []

    def test_parse_without_filling(self, client):
        body = client.post("/api/flow/parse", json={"text": "1. A\n4. D", "fillMissingNumbers": False}).get_json()
        assert [s["id"] for s in body["steps"]] == ["1", "4"]
        assert body["edges"][0]["id"] == "e-1-4"

    def test_duplicates_flagged(self, client):
        body = client.post("/api/flow/parse", json={"text": "1. A\n1. B"}).get_json()
        assert body["duplicates"] == ["1"]

    def test_text_required(self, client):
        assert client.post("/api/flow/parse", json={}).status_code == 400


class TestImportEndpoint:
    def test_import_steps_string(self, client):
        raw = '{"steps":[{"id":"1","title":"A","details":[]}]}'
        body = client.post("/api/flow/import", json={"flow": raw}).get_json()
        assert [n["data"]["title"] for n in body["nodes"]] == ["A"]

    def test_import_graph_object(self, client):
        graph = {"nodes": [{"id": "1", "data": {"label": "L"}}, {"id": "2", "data": {}}],
                 "edges": [{"source": "1", "target": "2"}]}
        body = client.post("/api/flow/import", json={"flow": graph}).get_json()
        assert [n["data"]["title"] for n in body["nodes"]] == ["L", "Untitled"]
        assert body["edges"][0]["id"] == "e-1-2"

    def test_import_invalid(self, client):
        resp = client.post("/api/flow/import", json={"flow": "not json"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid JSON format"}

    def test_import_rejects_nan_constants(self, client):
        raw = '{"nodes":[{"id":"1","position":{"x":NaN,"y":Infinity}}],"edges":[]}'
        resp = client.post("/api/flow/import", json={"flow": raw})
        assert resp.status_code == 400

    def test_import_resets_non_finite_positions(self, client):
        graph = {"nodes": [{"id": "1", "position": {"x": "nan", "y": "inf"}}], "edges": []}
        resp = client.post("/api/flow/import", json={"flow": graph})
        assert resp.status_code == 200
        text = resp.get_data(as_text=True)
        assert "NaN" not in text and "Infinity" not in text
        assert json.loads(text)["nodes"][0]["position"] == {"x": 0.0, "y": 0.0}

    def test_to_text(self, client):
        raw = json.dumps({"steps": [{"id": "1", "title": "A", "details": ["x"]}, {"id": "2", "title": "B"}]})
        body = client.post("/api/flow/to-text", json={"flow": raw}).get_json()
        assert body["text"] == "1. A\nx\n2. B"


class TestEditEndpoint:
    def _flow(self, client, text="1. A\n2. B"):
        return client.post("/api/flow/parse", json={"text": text}).get_json()

    def test_add_node(self, client):
        flow = self._flow(client)
        body = client.post("/api/flow/edit", json={"flow": flow, "op": "add_node"}).get_json()
        assert body["nodeId"] == "3"
        assert body["nodes"][-1]["data"]["title"] == "Step 3"

    def test_update_and_toggle(self, client):
        flow = self._flow(client)
        flow = client.post("/api/flow/edit", json={
            "flow": flow, "op": "update_node", "args": {"nodeId": "2", "title": "Bee", "details": "x\n\ny"},
        }).get_json()
        assert flow["nodes"][1]["data"]["details"] == ["x", "y"]
        flow = client.post("/api/flow/edit", json={
            "flow": flow, "op": "toggle_completion", "args": {"nodeId": "2"},
        }).get_json()
        assert flow["nodes"][1]["data"]["completed"] is True

    def test_delete_and_connect(self, client):
        flow = self._flow(client, "1. A\n2. B\n3. C")
        flow = client.post("/api/flow/edit", json={"flow": flow, "op": "delete_node", "args": {"nodeId": "2"}}).get_json()
        assert flow["edges"] == []
        flow = client.post("/api/flow/edit", json={
            "flow": flow, "op": "connect", "args": {"source": "1", "target": "3"},
        }).get_json()
        assert [e["id"] for e in flow["edges"]] == ["e-1-3"]

    def test_unknown_node_and_op(self, client):
        flow = self._flow(client)
        assert client.post("/api/flow/edit", json={
            "flow": flow, "op": "delete_node", "args": {"nodeId": "9"},
        }).status_code == 404
        assert client.post("/api/flow/edit", json={"flow": flow, "op": "explode"}).status_code == 400
