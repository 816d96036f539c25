from study_planner.errors import StorageUnavailable


class TestFoldersCRUD:
    def test_create_and_list(self, client):
        res = client.post("/api/v1/folders/", json={"name": " Mathematics ", "color": "#4ecdc4"})
        assert res.status_code == 201
        folder = res.json()
        assert folder["name"] == "Mathematics"
        assert folder["color"] == "#4ECDC4"
        assert folder["user_id"] == "user-1"
        assert folder["origin"] == "remote"

        listed = client.get("/api/v1/folders/").json()
        assert [f["id"] for f in listed] == [folder["id"]]

    def test_default_color(self, client):
        res = client.post("/api/v1/folders/", json={"name": "Art"})
        assert res.status_code == 201
        assert res.json()["color"] == "#FF6B6B"

    def test_rejects_bad_color_and_blank_name(self, client):
        assert client.post("/api/v1/folders/", json={"name": "Art", "color": "teal"}).status_code == 422
        assert client.post("/api/v1/folders/", json={"name": "   "}).status_code == 422

    def test_patch_folder(self, client):
        fid = client.post("/api/v1/folders/", json={"name": "Art", "color": "#BB8FCE"}).json()["id"]
        res = client.patch(f"/api/v1/folders/{fid}", json={"name": "Fine Art"})
        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "Fine Art"
        assert body["color"] == "#BB8FCE"

        assert client.patch("/api/v1/folders/nope", json={"name": "x"}).status_code == 404

    def test_delete_keeps_todos_and_clears_their_folder(self, client):
        fid = client.post("/api/v1/folders/", json={"name": "Physics", "color": "#45B7D1"}).json()["id"]
        inside = client.post("/api/v1/todos/", json={"title": "Lab report", "folder_id": fid}).json()
        outside = client.post("/api/v1/todos/", json={"title": "Groceries"}).json()

        res = client.delete(f"/api/v1/folders/{fid}")
        assert res.status_code == 204
        assert res.headers["X-Detached-Todos"] == "1"

        assert client.get("/api/v1/folders/").json() == []
        todos = {t["id"]: t for t in client.get("/api/v1/todos/").json()["items"]}
        assert set(todos) == {inside["id"], outside["id"]}
        assert todos[inside["id"]]["folder_id"] is None

    def test_delete_unknown_folder_is_noop(self, client):
        res = client.delete("/api/v1/folders/unknown")
        assert res.status_code == 204
        assert res.headers["X-Detached-Todos"] == "0"


class TestFoldersOffline:
    def test_folder_created_offline_is_listed_first(self, client, remote):
        online = client.post("/api/v1/folders/", json={"name": "Online"}).json()
        remote.failing = True
        offline = client.post("/api/v1/folders/", json={"name": "Offline"}).json()
        assert offline["origin"] == "local"
        assert offline["id"].startswith("local-")

        remote.failing = False
        names = [f["name"] for f in client.get("/api/v1/folders/").json()]
        assert names == ["Offline", "Online"]
        assert online["id"] != offline["id"]

    def test_storage_and_remote_both_down_is_503(self, client, remote, storage, monkeypatch):
        def broken(*args, **kwargs):
            raise StorageUnavailable("disk gone")

        remote.failing = True
        monkeypatch.setattr(storage, "get", broken)
        res = client.get("/api/v1/folders/")
        assert res.status_code == 503
        assert res.json() == {"error": "RemoteFailure", "message": "Failed to reach the task store"}


class TestFolderColors:
    def test_preset_palette(self, client):
        res = client.get("/api/v1/folders/colors")
        assert res.status_code == 200
        colors = res.json()
        assert len(colors) == 10
        assert colors[0] == "#FF6B6B"
        assert "#4ECDC4" in colors

    def test_every_preset_is_accepted(self, client):
        for color in client.get("/api/v1/folders/colors").json():
            res = client.post("/api/v1/folders/", json={"name": f"Folder {color}", "color": color})
            assert res.status_code == 201
            assert res.json()["color"] == color


class TestFolderOwnerIsolation:
    OTHER = {"X-User-Id": "user-2"}

    def test_other_owner_cannot_rename(self, client):
        fid = client.post("/api/v1/folders/", json={"name": "Mine"}).json()["id"]
        res = client.patch(f"/api/v1/folders/{fid}", json={"name": "taken"}, headers=self.OTHER)
        assert res.status_code == 404
        assert res.json()["detail"] == "Folder not found"
        assert [f["name"] for f in client.get("/api/v1/folders/").json()] == ["Mine"]

    def test_other_owner_cannot_delete_or_detach(self, client):
        fid = client.post("/api/v1/folders/", json={"name": "Mine"}).json()["id"]
        tid = client.post("/api/v1/todos/", json={"title": "Filed", "folder_id": fid}).json()["id"]

        res = client.delete(f"/api/v1/folders/{fid}", headers=self.OTHER)
        assert res.status_code == 204
        assert res.headers["X-Detached-Todos"] == "0"

        assert [f["id"] for f in client.get("/api/v1/folders/").json()] == [fid]
        todos = client.get("/api/v1/todos/").json()["items"]
        assert [(t["id"], t["folder_id"]) for t in todos] == [(tid, fid)]

    def test_other_owner_cannot_delete_local_folder(self, client, remote):
        remote.failing = True
        fid = client.post("/api/v1/folders/", json={"name": "Mine"}).json()["id"]
        assert client.delete(f"/api/v1/folders/{fid}", headers=self.OTHER).status_code == 204
        assert [f["id"] for f in client.get("/api/v1/folders/").json()] == [fid]
