"""
Tests for the follow graph, personal feed, trending and activity.
"""
import pytest

from conftest import create_recipe


def test_follow_toggles(client, alice, bob):
    first = client.post("/api/users/alice/follow", headers=bob["headers"])
    assert first.status_code == 200
    assert first.json()["isFollowing"] is True
    assert first.json()["message"] == "You are now following alice"
    assert first.json()["stats"]["followersCount"] == 1

    second = client.post("/api/users/alice/follow", headers=bob["headers"])
    assert second.json()["isFollowing"] is False
    assert second.json()["message"] == "You are no longer following alice"
    assert second.json()["stats"]["followersCount"] == 0


def test_cannot_follow_self(client, alice):
    response = client.post("/api/users/alice/follow", headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid operation"


def test_follow_unknown_user(client, alice):
    response = client.post("/api/users/ghost/follow", headers=alice["headers"])
    assert response.status_code == 404


def test_followers_and_following_lists(client, alice, bob, carol):
    client.post("/api/users/alice/follow", headers=bob["headers"])
    client.post("/api/users/alice/follow", headers=carol["headers"])
    client.post("/api/users/bob/follow", headers=alice["headers"])

    followers = client.get("/api/users/alice/followers", headers=alice["headers"]).json()
    assert followers["pagination"]["totalFollowers"] == 2
    assert [f["username"] for f in followers["followers"]] == ["carol", "bob"]
    back = {f["username"]: f["isFollowingBack"] for f in followers["followers"]}
    assert back == {"bob": True, "carol": False}

    following = client.get("/api/users/alice/following").json()
    assert following["pagination"]["totalFollowing"] == 1
    assert following["following"][0]["username"] == "bob"
    assert following["following"][0]["isFollowing"] is False


def test_follow_lists_respect_limits(client, alice):
    assert client.get("/api/users/alice/followers", params={"limit": 51}).status_code == 400


def test_suggestions_exclude_self_and_followed(client, alice, bob, carol):
    create_recipe(client, carol)
    client.post("/api/users/bob/follow", headers=alice["headers"])

    response = client.get("/api/suggestions", headers=alice["headers"])
    assert response.status_code == 200
    body = response.json()
    assert [s["username"] for s in body["suggestions"]] == ["carol"]
    assert body["suggestions"][0]["stats"]["recipeCount"] == 1
    assert body["totalSuggestions"] == 1


def test_suggestions_skip_private_profiles(client, alice, bob):
    client.put("/api/users/profile", json={"isPublicProfile": False}, headers=bob["headers"])
    body = client.get("/api/suggestions", headers=alice["headers"]).json()
    assert body["suggestions"] == []


def test_feed_contains_own_and_followed_public_recipes(client, alice, bob, carol):
    create_recipe(client, alice, title="Alice Public")
    create_recipe(client, bob, title="Bob Public")
    create_recipe(client, bob, title="Bob Private", isPublic=False)
    create_recipe(client, carol, title="Carol Public")
    client.post("/api/users/bob/follow", headers=alice["headers"])

    response = client.get("/api/feed", headers=alice["headers"])
    assert response.status_code == 200
    body = response.json()
    assert {r["title"] for r in body["feed"]} == {"Alice Public", "Bob Public"}
    assert body["pagination"] == {
        "currentPage": 1,
        "totalPages": 1,
        "totalRecipes": 2,
        "limit": 10,
        "hasNextPage": False,
        "hasPrevPage": False,
    }


def test_feed_pagination_counts_every_followed_recipe(client, alice, bob):
    client.post("/api/users/bob/follow", headers=alice["headers"])
    for title in ("First", "Second", "Third"):
        create_recipe(client, bob, title=title)

    first_page = client.get("/api/feed", params={"page": 1, "limit": 2}, headers=alice["headers"]).json()
    body = client.get("/api/feed", params={"page": 2, "limit": 2}, headers=alice["headers"]).json()
    titles = [r["title"] for r in first_page["feed"] + body["feed"]]
    assert sorted(titles) == ["First", "Second", "Third"]
    assert len(body["feed"]) == 1
    assert body["pagination"]["totalRecipes"] == 3
    assert body["pagination"]["totalPages"] == 2
    assert body["pagination"]["hasNextPage"] is False
    assert body["pagination"]["hasPrevPage"] is True


@pytest.mark.parametrize("path", ["/api/feed", "/api/trending", "/api/activity", "/api/collections/favorites"])
def test_feed_and_collection_limits_cap_at_fifty(client, alice, path):
    assert client.get(path, params={"limit": 51}, headers=alice["headers"]).status_code == 400
    assert client.get(path, params={"limit": 50}, headers=alice["headers"]).status_code == 200


def test_feed_requires_auth(client):
    assert client.get("/api/feed").status_code == 401


def test_trending_ranks_by_recent_likes(client, alice, bob, carol):
    popular = create_recipe(client, alice, title="Popular")
    quiet = create_recipe(client, alice, title="Quiet")
    create_recipe(client, alice, title="Unliked")
    hidden = create_recipe(client, alice, title="Hidden", isPublic=False)

    client.post(f"/api/recipes/{popular['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{popular['id']}/like", headers=carol["headers"])
    client.post(f"/api/recipes/{quiet['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{hidden['id']}/like", headers=alice["headers"])

    body = client.get("/api/trending").json()
    assert [r["title"] for r in body["trendingRecipes"]] == ["Popular", "Quiet"]
    assert body["trendingRecipes"][0]["stats"]["recentLikesCount"] == 2
    assert body["period"] == "Last 7 days"
    assert body["totalRecipes"] == 2


def test_activity_lists_engagement_from_others(client, alice, bob):
    recipe = create_recipe(client, alice, title="Soup")
    client.post(f"/api/recipes/{recipe['id']}/like", headers=alice["headers"])
    client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/comments", json={"comment": "Yum"}, headers=bob["headers"])
    client.post("/api/users/alice/follow", headers=bob["headers"])

    response = client.get("/api/activity", headers=alice["headers"])
    assert response.status_code == 200
    activities = response.json()["activities"]
    assert [a["type"] for a in activities] == ["follow", "comment", "like"]

    follow, comment, like = activities
    assert follow["message"] == "Bob Tester started following you"
    assert follow["id"] == f"follow-{bob['user']['id']}"
    assert comment["message"] == 'Bob Tester commented on your recipe "Soup"'
    assert comment["commentText"] == "Yum"
    assert like["message"] == 'Bob Tester liked your recipe "Soup"'
    assert like["id"] == f"like-{recipe['id']}-{bob['user']['id']}"
    assert like["recipe"]["id"] == recipe["id"]
