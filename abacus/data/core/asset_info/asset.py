from abacus.data.core.record_base import RecordBase
from abacus import db

class Asset(RecordBase):
    __tablename__ = 'assets'

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=True)
    date_placed_in_service = db.Column(db.Date, nullable=False)
    cost = db.Column(db.Numeric(18, 2), nullable=False)
    salvage_value = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    useful_life_years = db.Column(db.Integer, nullable=False)
    property_class = db.Column(db.String(10), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    disposed_date = db.Column(db.Date, nullable=True)
    disposed_value = db.Column(db.Numeric(18, 2), nullable=True)

    # Relationships
    category = db.relationship('Category', back_populates='assets')
    schedule_entries = db.relationship(
        'DepreciationEntry',
        back_populates='asset',
        cascade='all, delete-orphan',
        order_by='DepreciationEntry.year',
    )

    @property
    def is_disposed(self):
        return self.disposed_date is not None

    def __repr__(self):
        return f'<Asset {self.name} ({self.id})>'
