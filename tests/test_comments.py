from conftest import auth_headers, make_post
from hobbi.modules.comments.services.comment import counts_by_post_ids


def _url(post_id):
    return f"/api/v1/posts/{post_id}/comments"


class TestComments:
    def test_create_and_list(self, client, post_service, alice, bob):
        post = make_post(post_service, alice)

        created = client.post(_url(post.id), json={"content": "Looks fun"}, headers=auth_headers(bob))
        listed = client.get(_url(post.id), headers=auth_headers(alice))

        assert created.status_code == 201
        assert created.json()["user"]["nickname"] == "bob"
        assert [c["content"] for c in listed.json()] == ["Looks fun"]
        assert client.get(f"/api/v1/posts/{post.id}", headers=auth_headers(alice)).json()["comment_count"] == 1

    def test_comment_on_missing_post(self, client, alice):
        response = client.post(_url(999), json={"content": "hello"}, headers=auth_headers(alice))

        assert response.status_code == 404
        assert response.json()["code"] == "POST_NOT_FOUND"

    def test_only_author_deletes(self, client, post_service, alice, bob):
        post = make_post(post_service, alice)
        comment_id = client.post(_url(post.id), json={"content": "mine"}, headers=auth_headers(bob)).json()["id"]

        forbidden = client.delete(f"{_url(post.id)}/{comment_id}", headers=auth_headers(alice))
        deleted = client.delete(f"{_url(post.id)}/{comment_id}", headers=auth_headers(bob))
        missing = client.delete(f"{_url(post.id)}/{comment_id}", headers=auth_headers(bob))

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        assert missing.json()["code"] == "COMMENT_NOT_FOUND"

    def test_counts_by_post_ids_omits_posts_without_comments(self, db, client, post_service, alice):
        quiet = make_post(post_service, alice)
        busy = make_post(post_service, alice)
        client.post(_url(busy.id), json={"content": "1"}, headers=auth_headers(alice))
        client.post(_url(busy.id), json={"content": "2"}, headers=auth_headers(alice))

        assert counts_by_post_ids(db, [quiet.id, busy.id]) == {busy.id: 2}
        assert counts_by_post_ids(db, []) == {}
