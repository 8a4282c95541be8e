"""
End-to-end flows across several features.
"""
from conftest import create_recipe


def test_engagement_shows_up_in_statistics_and_history(client, alice, bob):
    recipe = create_recipe(client, alice)
    client.post(f"/api/recipes/{recipe['id']}/like", headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/rate", json={"rating": 4}, headers=bob["headers"])
    client.post(f"/api/recipes/{recipe['id']}/comments", json={"comment": "Lovely"}, headers=bob["headers"])

    stats = client.get("/api/statistics/user", headers=alice["headers"]).json()["engagementStats"]
    assert stats["likesReceived"] == 1
    assert stats["ratingsReceived"] == 1
    assert stats["averageRating"] == 4.0

    history = client.get("/api/collections/history", params={"type": "all"}, headers=bob["headers"]).json()
    entry = history["recipeHistory"][0]
    assert entry["id"] == recipe["id"]
    assert set(entry["interactionTypes"]) == {"rated", "commented"}


def test_follow_feeds_recipes_until_unfollow(client, alice, bob):
    client.post("/api/users/bob/follow", headers=alice["headers"])

    followers = client.get("/api/users/bob/followers").json()["followers"]
    assert [f["username"] for f in followers] == ["alice"]
    assert followers[0]["followedAt"]

    recipe = create_recipe(client, bob, title="Bob's Bread")
    feed = client.get("/api/feed", headers=alice["headers"]).json()["feed"]
    assert [r["id"] for r in feed] == [recipe["id"]]

    client.post("/api/users/bob/follow", headers=alice["headers"])
    assert client.get("/api/feed", headers=alice["headers"]).json()["feed"] == []


def test_doubling_a_recipe_doubles_every_quantity(client, alice, bob):
    recipe = create_recipe(
        client,
        alice,
        ingredients=[
            {"name": "Flour", "quantity": 0.33, "unit": "kg"},
            {"name": "Water", "quantity": 250, "unit": "ml"},
        ],
    )
    response = client.post(
        f"/api/shopping-list/recipes/{recipe['id']}", json={"servingMultiplier": 2}, headers=bob["headers"]
    )
    assert response.status_code == 201
    quantities = {item["ingredientName"]: item["quantity"] for item in response.json()["addedItems"]}
    assert quantities == {"Flour": 0.66, "Water": 500}


def test_replaced_ingredients_read_back_in_order(client, alice):
    recipe = create_recipe(client, alice)
    new_ingredients = [
        {"name": "Onion", "quantity": 1, "unit": "pc"},
        {"name": "Garlic", "quantity": 3, "unit": "cloves"},
        {"name": "Stock", "quantity": 1.25, "unit": "l"},
    ]
    client.put(f"/api/recipes/{recipe['id']}", json={"ingredients": new_ingredients}, headers=alice["headers"])

    detail = client.get(f"/api/recipes/{recipe['id']}").json()["recipe"]
    assert [(i["name"], i["quantity"], i["orderIndex"]) for i in detail["ingredients"]] == [
        ("Onion", 1, 1),
        ("Garlic", 3, 2),
        ("Stock", 1.25, 3),
    ]
