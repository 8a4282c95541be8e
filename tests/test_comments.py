"""
Tests for threaded comments.
"""
from conftest import create_recipe


def post_comment(client, account, recipe_id, text, parent=None):
    body = {"comment": text}
    if parent:
        body["parentCommentId"] = parent
    return client.post(f"/api/recipes/{recipe_id}/comments", json=body, headers=account["headers"])


def test_create_comment(client, alice, bob):
    recipe = create_recipe(client, alice)
    response = post_comment(client, bob, recipe["id"], "Great soup!")
    assert response.status_code == 201
    comment = response.json()["comment"]
    assert comment["comment"] == "Great soup!"
    assert comment["parentCommentId"] is None
    assert comment["isEdited"] is False
    assert comment["recipe"] == {"id": recipe["id"], "title": recipe["title"]}
    assert comment["replies"] == []
    assert comment["user"]["username"] == "bob"


def test_comment_length_limits(client, alice, bob):
    recipe = create_recipe(client, alice)
    assert post_comment(client, bob, recipe["id"], "").status_code == 400
    assert post_comment(client, bob, recipe["id"], "x" * 1001).status_code == 400


def test_cannot_comment_on_private_recipe(client, alice, bob):
    recipe = create_recipe(client, alice, isPublic=False)
    response = post_comment(client, bob, recipe["id"], "Let me in")
    assert response.status_code == 403


def test_reply_parent_checks(client, alice, bob):
    first = create_recipe(client, alice)
    second = create_recipe(client, alice, title="Another")
    parent = post_comment(client, bob, first["id"], "Top level").json()["comment"]

    missing = post_comment(client, alice, first["id"], "Reply", parent="nope")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Parent comment not found"

    wrong_recipe = post_comment(client, alice, second["id"], "Reply", parent=parent["id"])
    assert wrong_recipe.status_code == 400
    assert wrong_recipe.json()["error"] == "Parent comment does not belong to this recipe"


def test_listing_nests_replies_oldest_first(client, alice, bob, carol):
    recipe = create_recipe(client, alice)
    parent = post_comment(client, bob, recipe["id"], "Top level").json()["comment"]
    post_comment(client, alice, recipe["id"], "First reply", parent=parent["id"])
    post_comment(client, carol, recipe["id"], "Second reply", parent=parent["id"])
    post_comment(client, carol, recipe["id"], "Another top level")

    response = client.get(f"/api/recipes/{recipe['id']}/comments", params={"order": "asc"})
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["totalComments"] == 2
    assert [c["comment"] for c in body["comments"]] == ["Top level", "Another top level"]

    top = body["comments"][0]
    assert top["repliesCount"] == 2
    assert [r["comment"] for r in top["replies"]] == ["First reply", "Second reply"]
    assert body["comments"][1]["replies"] == []


def test_comment_count_in_recipe_stats_includes_replies(client, alice, bob):
    recipe = create_recipe(client, alice)
    parent = post_comment(client, bob, recipe["id"], "Top level").json()["comment"]
    post_comment(client, alice, recipe["id"], "Thanks!", parent=parent["id"])

    detail = client.get(f"/api/recipes/{recipe['id']}").json()["recipe"]
    assert detail["stats"]["commentsCount"] == 2


def test_update_comment_marks_edited(client, alice, bob):
    recipe = create_recipe(client, alice)
    comment = post_comment(client, bob, recipe["id"], "Great").json()["comment"]

    response = client.put(f"/api/comments/{comment['id']}", json={"comment": "Really great"}, headers=bob["headers"])
    assert response.status_code == 200
    updated = response.json()["comment"]
    assert updated["comment"] == "Really great"
    assert updated["isEdited"] is True


def test_only_comment_author_can_update(client, alice, bob):
    recipe = create_recipe(client, alice)
    comment = post_comment(client, bob, recipe["id"], "Great").json()["comment"]

    response = client.put(f"/api/comments/{comment['id']}", json={"comment": "Hijacked"}, headers=alice["headers"])
    assert response.status_code == 403


def test_update_unknown_comment(client, bob):
    response = client.put("/api/comments/missing", json={"comment": "Hello"}, headers=bob["headers"])
    assert response.status_code == 404
    assert response.json()["error"] == "Comment not found"


def test_recipe_author_can_delete_any_comment(client, alice, bob):
    recipe = create_recipe(client, alice)
    text = "A very long comment that certainly runs past fifty characters in length"
    comment = post_comment(client, bob, recipe["id"], text).json()["comment"]
    post_comment(client, alice, recipe["id"], "Reply", parent=comment["id"])

    response = client.delete(f"/api/comments/{comment['id']}", headers=alice["headers"])
    assert response.status_code == 200
    deleted = response.json()["deletedComment"]
    assert deleted["preview"] == text[:50] + "..."

    listing = client.get(f"/api/recipes/{recipe['id']}/comments").json()
    assert listing["comments"] == []
    detail = client.get(f"/api/recipes/{recipe['id']}").json()["recipe"]
    assert detail["stats"]["commentsCount"] == 0


def test_bystander_cannot_delete_comment(client, alice, bob, carol):
    recipe = create_recipe(client, alice)
    comment = post_comment(client, bob, recipe["id"], "Mine").json()["comment"]

    response = client.delete(f"/api/comments/{comment['id']}", headers=carol["headers"])
    assert response.status_code == 403
    assert response.json()["message"] == "You can only delete your own comments or comments on your recipes"
