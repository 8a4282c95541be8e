"""
Tests for platform and user statistics, favorites and interaction history.
"""
from conftest import create_recipe


def test_platform_statistics(client, alice, bob):
    recipe = create_recipe(client, alice)
    create_recipe(client, alice, title="Private", isPublic=False)
    client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 4}, headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/comments", json={"comment": "Nice"}, headers=bob["headers"])
    client.post("/api/users/alice/follow", headers=bob["headers"])

    response = client.get("/api/statistics/platform")
    assert response.status_code == 200
    body = response.json()
    stats = body["platformStats"]
    assert stats["totalUsers"] == 2
    assert stats["totalRecipes"] == 1
    assert stats["totalLikes"] == 1
    assert stats["totalComments"] == 1
    assert stats["totalRatings"] == 1
    assert stats["totalFollows"] == 1
    assert stats["averageRating"] == 4.0
    assert stats["totalCategories"] > 0
    assert body["recentActivity"]["newUsersThisWeek"] == 2
    assert body["recentActivity"]["newRecipesThisWeek"] == 1
    assert len(body["popularCategories"]) <= 10


def test_user_statistics(client, alice, bob):
    dinner = next(c["id"] for c in client.get("/api/categories").json()["categories"] if c["name"] == "Dinner")
    top = create_recipe(client, alice, title="Top", categoryIds=[dinner])
    create_recipe(client, alice, title="Draft", isPublic=False, prepTimeMinutes=20, cookTimeMinutes=40)
    client.post(f"/api/recipes/{top['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{top['id']}/rate", json={"rating": 5}, headers=bob["headers"])
    client.post(f"/api/recipes/{top['id']}/comments", json={"comment": "Yum"}, headers=bob["headers"])
    client.post(f"/api/recipes/{top['id']}/comments", json={"comment": "Thanks"}, headers=alice["headers"])
    client.post("/api/shopping-list/items", json={"ingredientName": "Rice"}, headers=alice["headers"])

    response = client.get("/api/statistics/user", headers=alice["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["recipeStats"] == {
        "totalRecipes": 2,
        "publicRecipes": 1,
        "privateRecipes": 1,
        "featuredRecipes": 0,
        "averageTotalTime": 45,
    }
    engagement = body["engagementStats"]
    assert engagement["likesReceived"] == 1
    assert engagement["commentsReceived"] == 1
    assert engagement["ratingsReceived"] == 1
    assert engagement["averageRating"] == 5.0
    assert body["activityStats"]["commentsMade"] == 1
    assert body["activityStats"]["shoppingListItems"] == 1
    assert body["topRecipe"]["title"] == "Top"
    assert body["topRecipe"]["likesCount"] == 1
    assert [c["name"] for c in body["categoryBreakdown"]] == ["Dinner"]


def test_user_statistics_for_new_account(client, alice):
    body = client.get("/api/statistics/user", headers=alice["headers"]).json()
    assert body["recipeStats"]["totalRecipes"] == 0
    assert body["recipeStats"]["averageTotalTime"] is None
    assert body["engagementStats"]["averageRating"] is None
    assert body["topRecipe"] is None
    assert body["categoryBreakdown"] == []


def test_favorites_list_liked_visible_recipes(client, alice, bob):
    soup = create_recipe(client, alice, title="Soup")
    stew = create_recipe(client, alice, title="Stew")
    client.post(f"/api/recipes/{soup['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{stew['id']}/like", headers=bob["headers"])
    client.put(f"/api/recipes/{stew['id']}", json={"isPublic": False}, headers=alice["headers"])

    body = client.get("/api/collections/favorites", headers=bob["headers"]).json()
    assert [r["title"] for r in body["favoriteRecipes"]] == ["Soup"]
    assert body["favoriteRecipes"][0]["isLikedByUser"] is True
    assert body["favoriteRecipes"][0]["likedAt"]
    assert body["pagination"]["totalFavorites"] == 1


def test_favorites_sort_by_title(client, alice, bob):
    for title in ("Zucchini Bake", "Apple Tart"):
        recipe = create_recipe(client, alice, title=title)
        client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])

    body = client.get("/api/collections/favorites", params={"sort": "title"}, headers=bob["headers"]).json()
    assert [r["title"] for r in body["favoriteRecipes"]] == ["Apple Tart", "Zucchini Bake"]
    assert body["sort"] == "title"


def test_history_merges_interaction_kinds(client, alice, bob):
    soup = create_recipe(client, alice, title="Soup")
    stew = create_recipe(client, alice, title="Stew")
    client.post(f"/api/recipes/{soup['id']}/rate", json={"rating": 3}, headers=bob["headers"])
    client.post(f"/api/recipes/{soup['id']}/comments", json={"comment": "Okay"}, headers=bob["headers"])
    client.post(f"/api/recipes/{stew['id']}/comments", json={"comment": "Hearty"}, headers=bob["headers"])

    body = client.get("/api/collections/history", headers=bob["headers"]).json()
    assert body["filterType"] == "all"
    history = {r["title"]: r for r in body["recipeHistory"]}
    assert list(history) == ["Stew", "Soup"]
    assert history["Soup"]["interactionTypes"] == ["commented", "rated"]
    assert history["Soup"]["userRating"] == 3
    assert history["Stew"]["interactionType"] == "commented"
    assert history["Stew"]["userRating"] is None

    rated = client.get("/api/collections/history", params={"type": "rated"}, headers=bob["headers"]).json()
    assert [r["title"] for r in rated["recipeHistory"]] == ["Soup"]
    assert rated["recipeHistory"][0]["interactionType"] == "rated"


def test_collections_require_auth(client):
    assert client.get("/api/collections/favorites").status_code == 401
    assert client.get("/api/collections/history").status_code == 401
