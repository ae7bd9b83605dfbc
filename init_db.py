from flask_migrate import upgrade
from app import app, db, Asset

# Example herd for a fresh install
INITIAL_ANIMALS = [
    {'name': 'Bessie', 'status': 'active'},
    {'name': 'Clarabelle', 'status': 'active'},
    {'name': 'Daisy', 'status': 'active'},
    {'name': 'Old Buttercup', 'status': 'archived'},
]

def init_db():
    with app.app_context():
        upgrade()

        if Asset.query.filter_by(type='animal').count() == 0:
            for animal in INITIAL_ANIMALS:
                db.session.add(Asset(name=animal['name'], type='animal', status=animal['status']))
                print(f"Added Animal: {animal['name']} ({animal['status']})")

        db.session.commit()
        print("Database initialized.")

if __name__ == "__main__":
    init_db()
