from abacus.data.core.record_base import RecordBase
from abacus import db

class Category(RecordBase):
    __tablename__ = 'categories'

    name = db.Column(db.String(100), nullable=False, unique=True)
    default_useful_life = db.Column(db.Integer, nullable=True)
    default_property_class = db.Column(db.String(10), nullable=True)

    # Weak reference: assets keep working when they have no category
    assets = db.relationship('Asset', back_populates='category', lazy='dynamic')

    def __repr__(self):
        return f'<Category {self.name}>'
