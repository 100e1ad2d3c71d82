import pytest
from bson import ObjectId

from conftest import signup


def _comment(client, rid, rating, content="Really tasty recipe", headers=None):
    return client.post(f"/api/recipes/{rid}/comments", json={"content": content, "rating": rating}, headers=headers)


def test_three_comments_average(client, recipe):
    for r in [5, 4, 5]:
        assert _comment(client, recipe["id"], r).status_code == 201

    data = client.get(f"/api/recipes/{recipe['id']}").json()
    assert data["rating"] == 4.7
    assert data["reviewCount"] == 3


def test_new_recipe_has_zero_rating(client, recipe):
    data = client.get(f"/api/recipes/{recipe['id']}").json()
    assert data["rating"] == 0
    assert data["reviewCount"] == 0


@pytest.mark.parametrize("rating", [0, 6, -1, 5.5])
def test_out_of_range_rating_rejected(client, recipe, rating):
    resp = _comment(client, recipe["id"], rating)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Rating must be between 1 and 5"}

    data = client.get(f"/api/recipes/{recipe['id']}").json()
    assert data["reviewCount"] == 0
    assert client.get(f"/api/recipes/{recipe['id']}/comments").json()["total"] == 0


@pytest.mark.parametrize("rating", [True, False])
def test_boolean_rating_rejected(client, recipe, rating):
    resp = _comment(client, recipe["id"], rating)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Rating must be a number"}
    assert client.get(f"/api/recipes/{recipe['id']}").json()["reviewCount"] == 0


def test_fractional_rating_rounds_half_up(client, recipe):
    resp = _comment(client, recipe["id"], 3.5)
    assert resp.status_code == 201
    assert resp.json()["rating"] == 4


def test_comment_content_length(client, recipe):
    resp = _comment(client, recipe["id"], 4, content="   ok   ")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Comment must be at least 5 characters long"}

    resp = _comment(client, recipe["id"], 4, content="x" * 1001)
    assert resp.json() == {"error": "Comment cannot exceed 1000 characters"}


def test_comment_missing_rating(client, recipe):
    resp = client.post(f"/api/recipes/{recipe['id']}/comments", json={"content": "No stars given"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "rating is required"}


def test_anonymous_comment(client, recipe):
    resp = _comment(client, recipe["id"], 5)
    assert resp.status_code == 201
    data = resp.json()
    assert data["author"] is None
    assert data["authorName"] == "Anonymous"
    assert data["recipe"] == recipe["id"]
    assert data["isApproved"] is True
    assert "_id" not in data


def test_authenticated_comment(client, recipe):
    user, headers = signup(client, email="fan@example.com", name="Big Fan")
    data = _comment(client, recipe["id"], 4, headers=headers).json()
    assert data["author"] == {"id": user["id"], "name": "Big Fan"}
    assert data["authorName"] == "Big Fan"


def test_listed_comments_carry_author_name(client, recipe):
    user, headers = signup(client, email="fan@example.com", name="Big Fan")
    _comment(client, recipe["id"], 4, headers=headers)
    _comment(client, recipe["id"], 5)

    listed = client.get(f"/api/recipes/{recipe['id']}/comments").json()["comments"]
    assert listed[0]["author"] is None
    assert listed[1]["author"] == {"id": user["id"], "name": "Big Fan"}


def test_invalid_token_posts_anonymously(client, recipe):
    resp = _comment(client, recipe["id"], 4, headers={"Authorization": "Bearer broken"})
    assert resp.status_code == 201
    assert resp.json()["authorName"] == "Anonymous"


def test_comment_on_missing_recipe(client):
    resp = _comment(client, str(ObjectId()), 5)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Recipe not found"}


def test_unapproved_comments_are_hidden_and_not_counted(client, recipe, store):
    _comment(client, recipe["id"], 5)
    store.db["comments"]._col.insert_one({
        "recipe": ObjectId(recipe["id"]),
        "author": None,
        "authorName": "Spammer",
        "content": "Buy cheap pans here",
        "rating": 1,
        "isApproved": False,
    })
    _comment(client, recipe["id"], 3)

    data = client.get(f"/api/recipes/{recipe['id']}").json()
    assert data["rating"] == 4.0
    assert data["reviewCount"] == 2

    listed = client.get(f"/api/recipes/{recipe['id']}/comments").json()
    assert listed["total"] == 2
    assert all(c["authorName"] != "Spammer" for c in listed["comments"])


def test_comments_paginated_newest_first(client, recipe):
    for i in range(3):
        _comment(client, recipe["id"], 4, content=f"Comment number {i}")

    data = client.get(f"/api/recipes/{recipe['id']}/comments", params={"limit": 2}).json()
    assert data["total"] == 3
    assert data["pages"] == 2
    assert [c["content"] for c in data["comments"]] == ["Comment number 2", "Comment number 1"]
