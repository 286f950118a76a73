def test_health_reports_counts(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["rooms"] == 0
    assert body["peers"] == 0
    assert body["connections"] == 0


def test_health_counts_connected_peers(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"type": "join-room", "roomId": "r1"})
        ws.receive_json()
        ws.receive_json()

        body = client.get("/health").json()
        assert body["rooms"] == 1
        assert body["peers"] == 1
        assert body["connections"] == 1
