import pytest

from conftest import make_recipe
from recipebook.db.errors import WriteConflict
from recipebook.shared.schemas.recipe import IngredientQuantity, Quantity


def test_load_empty(repo):
    assert repo.load_recipes() == []


def test_add(repo, rows):
    recipe = make_recipe()

    repo.add_recipe(recipe)
    assert repo.load_recipes() == [recipe]

    recipe_2 = make_recipe(id=2)
    repo.add_recipe(recipe_2)
    assert repo.load_recipes() == [recipe, recipe_2]

    potatoes = rows("SELECT id FROM ingredients WHERE name = 'Potato'")
    assert len(potatoes) == 1
    linked = rows("SELECT recipe_id, ingredient_id FROM recipe_ingredients")
    assert sorted(tuple(r) for r in linked) == [
        (1, potatoes[0].id),
        (2, potatoes[0].id),
    ]


def test_add_ignores_client_id(repo):
    repo.add_recipe(make_recipe(id=42))

    (stored,) = repo.load_recipes()
    assert stored.id == 1


def test_add_without_desc_or_children(repo):
    recipe = make_recipe(desc=None, steps=[], ingredients=[])

    repo.add_recipe(recipe)

    assert repo.load_recipes() == [recipe]


def test_quantity_belongs_to_the_recipe(repo, rows):
    flour_cup = IngredientQuantity(
        ingredient="Flour", quantity=Quantity(value=1.0, unit="cup")
    )
    flour_grams = IngredientQuantity(
        ingredient="Flour", quantity=Quantity(value=250.0, unit="gram")
    )
    repo.add_recipe(make_recipe(name="Pancakes", ingredients=[flour_cup]))
    repo.add_recipe(make_recipe(name="Bread", ingredients=[flour_grams]))

    loaded = {r.name: r for r in repo.load_recipes()}
    assert loaded["Pancakes"].ingredients == [flour_cup]
    assert loaded["Bread"].ingredients == [flour_grams]
    assert len(rows("SELECT id FROM ingredients")) == 1


def test_add_several_steps_and_ingredients(repo):
    recipe = make_recipe(
        steps=["Peel", "Boil", "Mash"],
        ingredients=[
            IngredientQuantity(
                ingredient="Potato", quantity=Quantity(value=4.0, unit="whole")
            ),
            IngredientQuantity(
                ingredient="Butter", quantity=Quantity(value=2.5, unit="tbsp")
            ),
        ],
    )

    repo.add_recipe(recipe)

    assert repo.load_recipes() == [recipe]


def test_order_is_kept_regardless_of_catalog_ids(repo):
    apple = IngredientQuantity(
        ingredient="Apple", quantity=Quantity(value=2.0, unit="whole")
    )
    zucchini = IngredientQuantity(
        ingredient="Zucchini", quantity=Quantity(value=1.0, unit="whole")
    )
    repo.add_recipe(make_recipe(name="Pie", ingredients=[apple]))

    salad = make_recipe(
        id=2,
        name="Salad",
        steps=["Wash", "Chop", "Toss"],
        ingredients=[zucchini, apple],
    )
    repo.add_recipe(salad)

    assert repo.load_recipes()[1] == salad


def test_duplicate_step_is_a_conflict(repo, rows):
    recipe = make_recipe(steps=["Stir", "Stir"])

    with pytest.raises(WriteConflict):
        repo.add_recipe(recipe)

    assert repo.load_recipes() == []
    assert rows("SELECT * FROM steps") == []
    assert rows("SELECT * FROM recipe_ingredients") == []
    assert rows("SELECT * FROM ingredients") == []


def test_duplicate_ingredient_is_a_conflict(repo, rows):
    potato = IngredientQuantity(
        ingredient="Potato", quantity=Quantity(value=1.0, unit="whole")
    )

    with pytest.raises(WriteConflict):
        repo.add_recipe(make_recipe(ingredients=[potato, potato]))

    assert rows("SELECT * FROM recipes") == []
    assert rows("SELECT * FROM steps") == []
    assert rows("SELECT * FROM ingredients") == []


def test_delete(repo, rows):
    repo.add_recipe(make_recipe())
    assert len(repo.load_recipes()) == 1

    repo.delete_recipe(1)

    assert repo.load_recipes() == []
    assert rows("SELECT * FROM steps WHERE recipe_id = 1") == []
    assert rows("SELECT * FROM recipe_ingredients WHERE recipe_id = 1") == []


def test_delete_keeps_other_recipes_and_catalog(repo, rows):
    repo.add_recipe(make_recipe())
    repo.add_recipe(make_recipe(name="Second"))

    repo.delete_recipe(1)

    (remaining,) = repo.load_recipes()
    assert remaining == make_recipe(id=2, name="Second")
    assert [r.name for r in rows("SELECT name FROM ingredients")] == ["Potato"]


def test_delete_missing_id(repo):
    repo.delete_recipe(999)

    assert repo.load_recipes() == []


def test_update(repo):
    recipe = make_recipe()
    repo.add_recipe(recipe)

    recipe_2 = make_recipe(steps=[])
    repo.update_recipe(recipe_2)

    assert repo.load_recipes() == [recipe_2]


def test_update_replaces_everything(repo, rows):
    repo.add_recipe(make_recipe())

    updated = make_recipe(
        name="Mash",
        desc=None,
        steps=["Peel", "Boil"],
        ingredients=[
            IngredientQuantity(
                ingredient="Butter", quantity=Quantity(value=30.0, unit="gram")
            )
        ],
    )
    repo.update_recipe(updated)

    (stored,) = repo.load_recipes()
    assert stored.name == "Mash"
    assert stored.desc is None
    assert stored.steps == ["Peel", "Boil"]
    assert stored.ingredients == updated.ingredients
    # catalog rows are never removed
    assert sorted(r.name for r in rows("SELECT name FROM ingredients")) == [
        "Butter",
        "Potato",
    ]


def test_update_missing_id(repo, rows):
    repo.update_recipe(make_recipe(id=999))

    assert repo.load_recipes() == []
    assert rows("SELECT * FROM steps") == []
    assert rows("SELECT * FROM ingredients") == []


def test_update_conflict_rolls_back(repo):
    original = make_recipe()
    repo.add_recipe(original)

    with pytest.raises(WriteConflict):
        repo.update_recipe(make_recipe(name="Changed", steps=["Same", "Same"]))

    assert repo.load_recipes() == [original]


def test_update_requires_id(repo):
    with pytest.raises(ValueError):
        repo.update_recipe(make_recipe(id=None))
