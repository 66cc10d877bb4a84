# seed.py
from configs import db
from werkzeug.security import generate_password_hash
from dao import user as user_dao
from dao.session import commit
from db.models.category import Category, MaterialType
from db.models.material import Material
from db.models.user import User
from utils.auth import EDIT_REQUISITIONS, MANAGE_CATEGORY, MANAGE_SALES

TEMPLATES = [
    (MANAGE_CATEGORY, "Manage materials of a category"),
    (MANAGE_SALES, "Manage sellable materials"),
    (EDIT_REQUISITIONS, "Edit requisitions"),
]


# -------- Permission templates --------
def seed_templates():
    for code, label in TEMPLATES:
        tpl = user_dao.ensure_template(code, label)
        tpl.label = label
    commit()
    print("✓ Permission templates seeded/updated")


# -------- Categories & types --------
def seed_categories():
    categories = {
        "Sports": ["Balls", "Nets"],
        "Stationery": ["Paper", "Writing"],
        "Cafeteria": ["Snacks"],
    }
    for cat_name, type_names in categories.items():
        cat = Category.query.filter_by(name=cat_name).first()
        if not cat:
            cat = Category(name=cat_name)
            db.session.add(cat)
            db.session.flush()
        for type_name in type_names:
            t = MaterialType.query.filter_by(name=type_name).first()
            if not t:
                db.session.add(MaterialType(name=type_name, category_id=cat.id))
            else:
                t.category_id = cat.id
    commit()
    print("✓ Categories & types seeded/updated")


def get_type_id(name: str) -> int:
    t = MaterialType.query.filter_by(name=name).first()
    if not t:
        raise RuntimeError(f"Type '{name}' missing. Run seed_categories() first.")
    return t.id


# -------- Materials --------
def seed_materials():
    materials = [
        # name, type, price, stock, sellable, consumable, location
        ("Football", "Balls", 25.00, 20, False, False, "Gym store A1"),
        ("Volleyball net", "Nets", 60.00, 4, False, False, "Gym store B2"),
        ("A4 paper ream", "Paper", 4.50, 200, False, True, "Office shelf 3"),
        ("Whiteboard marker", "Writing", 1.20, 150, False, True, "Office shelf 1"),
        ("Cereal bar", "Snacks", 0.80, 300, True, True, "Cafeteria pantry"),
    ]
    for name, type_name, price, stock, sellable, consumable, location in materials:
        type_id = get_type_id(type_name)
        m = Material.query.filter_by(name=name).first()
        if not m:
            db.session.add(
                Material(
                    name=name,
                    type_id=type_id,
                    price=price,
                    stock=stock,
                    sellable=sellable,
                    consumable=consumable,
                    location=location,
                    is_active=True,
                )
            )
        else:
            m.type_id = type_id
            m.price = price
            m.sellable = sellable
            m.consumable = consumable
            m.location = location
    commit()
    print("✓ Materials seeded/updated")


# -------- Users & grants --------
def seed_users():
    sports = Category.query.filter_by(name="Sports").first()
    users = [
        # username, full name, grants
        ("admin", "System Admin", [(MANAGE_CATEGORY, None, None)]),
        ("teacher1", "Requesting Teacher", []),
        (
            "sports1",
            "Sports Storekeeper",
            [(MANAGE_CATEGORY, "category", sports.id if sports else None)],
        ),
        ("cashier1", "Cafeteria Cashier", [(MANAGE_SALES, None, None)]),
        ("secretary1", "School Secretary", [(EDIT_REQUISITIONS, None, None)]),
    ]
    for username, full_name, grants in users:
        if User.query.filter_by(username=username).first():
            continue
        u = User(
            username=username,
            password_hash=generate_password_hash("1"),
            full_name=full_name,
            is_active=True,
        )
        db.session.add(u)
        for code, resource_type, resource_id in grants:
            user_dao.grant(u, code, resource_type, resource_id)
    commit()
    print("✓ Users seeded")


def seed_all():
    seed_templates()
    seed_categories()
    seed_materials()
    seed_users()


if __name__ == "__main__":
    from app import app

    with app.app_context():
        seed_all()
        print("✅ Seed data loaded")
