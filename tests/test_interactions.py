"""
Tests for likes and ratings.
"""
from conftest import create_recipe


def test_like_toggles(client, alice, bob):
    recipe = create_recipe(client, alice)

    first = client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])
    assert first.status_code == 200
    assert first.json()["isLiked"] is True
    assert first.json()["likesCount"] == 1
    assert first.json()["message"] == "Recipe liked successfully"

    second = client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])
    assert second.json()["isLiked"] is False
    assert second.json()["likesCount"] == 0
    assert second.json()["message"] == "Recipe unliked successfully"


def test_authors_may_like_their_own_recipe(client, alice):
    recipe = create_recipe(client, alice)
    response = client.post(f"/api/recipes/{recipe['id']}/like", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["isLiked"] is True


def test_cannot_like_private_recipe(client, alice, bob):
    recipe = create_recipe(client, alice, isPublic=False)
    response = client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])
    assert response.status_code == 403
    assert response.json()["message"] == "Cannot like a private recipe"


def test_like_unknown_recipe(client, bob):
    response = client.post("/api/recipes/missing/like", headers=bob["headers"])
    assert response.status_code == 404


def test_rate_creates_then_updates(client, alice, bob, carol):
    recipe = create_recipe(client, alice)

    created = client.post(
        f"/api/recipes/{recipe['id']}/rate", json={"rating": 4, "review": "Tasty"}, headers=bob["headers"]
    )
    assert created.status_code == 200
    assert created.json()["message"] == "Rating created successfully"

    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 5}, headers=carol["headers"])
    updated = client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 2}, headers=bob["headers"])
    body = updated.json()
    assert body["message"] == "Rating updated successfully"
    assert body["rating"]["rating"] == 2
    assert body["rating"]["review"] is None
    assert body["recipe"]["averageRating"] == 3.5
    assert body["recipe"]["ratingsCount"] == 2


def test_cannot_rate_own_recipe(client, alice):
    recipe = create_recipe(client, alice)
    response = client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 5}, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid operation"


def test_rating_out_of_range(client, alice, bob):
    recipe = create_recipe(client, alice)
    response = client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 6}, headers=bob["headers"])
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "rating"


def test_ratings_listing_with_distribution(client, alice, bob, carol):
    recipe = create_recipe(client, alice)
    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 5}, headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 4}, headers=carol["headers"])

    response = client.get(f"/api/recipes/{recipe['id']}/ratings")
    assert response.status_code == 200
    body = response.json()
    assert len(body["ratings"]) == 2
    assert body["summary"]["averageRating"] == 4.5
    assert body["summary"]["totalRatings"] == 2
    assert body["summary"]["distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 1}
    assert body["pagination"]["totalRatings"] == 2
    assert {r["user"]["username"] for r in body["ratings"]} == {"bob", "carol"}


def test_ratings_listing_empty(client, alice):
    recipe = create_recipe(client, alice)
    body = client.get(f"/api/recipes/{recipe['id']}/ratings").json()
    assert body["ratings"] == []
    assert body["summary"]["averageRating"] is None


def test_delete_rating(client, alice, bob):
    recipe = create_recipe(client, alice)
    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 3}, headers=bob["headers"])

    response = client.delete(f"/api/recipes/{recipe['id']}/rating", headers=bob["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "Rating deleted successfully"

    again = client.delete(f"/api/recipes/{recipe['id']}/rating", headers=bob["headers"])
    assert again.status_code == 404
    assert again.json()["error"] == "Rating not found"


def test_detail_reports_user_rating_and_stats(client, alice, bob):
    recipe = create_recipe(client, alice)
    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 4}, headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])

    detail = client.get(f"/api/recipes/{recipe['id']}", headers=bob["headers"]).json()["recipe"]
    assert detail["userRating"] == 4
    assert detail["isLikedByUser"] is True
    assert detail["stats"]["averageRating"] == 4.0
    assert detail["stats"]["ratingsCount"] == 1
    assert detail["stats"]["likesCount"] == 1
