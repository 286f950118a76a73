"""End-to-end signaling scenarios over a real WebSocket via TestClient."""


def test_peer_receives_identity_on_connect(client):
    with client.websocket_connect("/ws") as ws:
        message = ws.receive_json()
        assert message["type"] == "your-peer-id"
        assert message["peerId"]


def test_full_signaling_scenario(client):
    with client.websocket_connect("/ws") as ws_x:
        x = ws_x.receive_json()["peerId"]

        ws_x.send_json({"type": "join-room", "roomId": "r1"})
        assert ws_x.receive_json() == {"type": "existing-peers", "roomId": "r1", "peers": []}
        assert ws_x.receive_json() == {"type": "joined-room", "roomId": "r1", "peerId": x}

        with client.websocket_connect("/ws") as ws_y:
            y = ws_y.receive_json()["peerId"]
            assert y != x

            ws_y.send_json({"type": "join-room", "roomId": "r1"})
            assert ws_y.receive_json() == {"type": "existing-peers", "roomId": "r1", "peers": [x]}
            assert ws_y.receive_json() == {"type": "joined-room", "roomId": "r1", "peerId": y}
            assert ws_x.receive_json() == {"type": "new-peer-joined", "roomId": "r1", "newPeerId": y}

            ws_x.send_json({"type": "offer", "targetPeerId": y, "sdp": "v=0"})
            assert ws_y.receive_json() == {
                "type": "offer",
                "targetPeerId": y,
                "sdp": "v=0",
                "senderPeerId": x,
            }

            ws_y.send_json({"type": "answer", "targetPeerId": x, "sdp": "v=0 answer"})
            assert ws_x.receive_json()["senderPeerId"] == y

        # Y disconnected: X is the sole remaining member
        assert ws_x.receive_json() == {
            "type": "peer-left",
            "roomId": "r1",
            "leavingPeerId": y,
            "message": f"Peer {y} has disconnected.",
        }

        # peer-left is sent after Y was removed, so the room still holds only X
        health = client.get("/health").json()
        assert health["rooms"] == 1
        assert health["peers"] == 1


def test_errors_do_not_close_the_connection(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        ws.send_text("definitely not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON message."}

        ws.send_json({"type": "offer", "targetPeerId": "someone"})
        assert ws.receive_json() == {
            "type": "error",
            "message": "You are not in a valid room to send signaling data.",
        }

        ws.send_json({"type": "bogus"})
        assert ws.receive_json() == {"type": "error", "message": "Unknown message type: bogus"}

        ws.send_json({"type": "join-room", "roomId": "still-alive"})
        assert ws.receive_json()["type"] == "existing-peers"
        assert ws.receive_json()["type"] == "joined-room"


def test_relay_to_peer_in_other_room_is_rejected(client):
    with client.websocket_connect("/ws") as ws_x, client.websocket_connect("/ws") as ws_z:
        ws_x.receive_json()
        z = ws_z.receive_json()["peerId"]

        ws_x.send_json({"type": "join-room", "roomId": "r1"})
        ws_x.receive_json()
        ws_x.receive_json()
        ws_z.send_json({"type": "join-room", "roomId": "r2"})
        ws_z.receive_json()
        ws_z.receive_json()

        ws_x.send_json({"type": "ice-candidate", "targetPeerId": z, "candidate": "c"})
        assert ws_x.receive_json() == {
            "type": "error",
            "message": f"Target peer {z} not found or not available.",
        }


def test_binary_frames_are_accepted(client):
    with client.websocket_connect("/ws") as ws:
        peer_id = ws.receive_json()["peerId"]
        ws.send_bytes(b'{"type": "join-room", "roomId": "bin"}')
        assert ws.receive_json()["type"] == "existing-peers"
        assert ws.receive_json() == {"type": "joined-room", "roomId": "bin", "peerId": peer_id}


def test_deeply_nested_frame_keeps_connection_open(client):
    with client.websocket_connect("/ws") as ws:
        peer_id = ws.receive_json()["peerId"]

        ws.send_text('{"type": "join-room", "roomId": ' + "[" * 5000 + "}")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON message."}

        ws.send_json({"type": "join-room", "roomId": "after-nesting"})
        assert ws.receive_json()["type"] == "existing-peers"
        assert ws.receive_json() == {"type": "joined-room", "roomId": "after-nesting", "peerId": peer_id}
