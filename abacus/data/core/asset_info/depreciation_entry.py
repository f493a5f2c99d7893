from abacus.data.core.record_base import RecordBase
from abacus.buisness.depreciation.structs import ScheduleEntry
from abacus import db

class DepreciationEntry(RecordBase):
    __tablename__ = 'depreciation_entries'
    __table_args__ = (
        db.UniqueConstraint('asset_id', 'year', name='uq_depreciation_entry_asset_year'),
    )

    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id', ondelete='CASCADE'), nullable=False, index=True)
    year = db.Column(db.Integer, nullable=False)
    beginning_book_value = db.Column(db.Numeric(18, 2), nullable=False)
    depreciation_expense = db.Column(db.Numeric(18, 2), nullable=False)
    accumulated_depreciation = db.Column(db.Numeric(18, 2), nullable=False)
    ending_book_value = db.Column(db.Numeric(18, 2), nullable=False)

    asset = db.relationship('Asset', back_populates='schedule_entries')

    @classmethod
    def from_schedule_entry(cls, entry: ScheduleEntry):
        return cls(
            year=entry.year,
            beginning_book_value=entry.beginning_book_value,
            depreciation_expense=entry.depreciation_expense,
            accumulated_depreciation=entry.accumulated_depreciation,
            ending_book_value=entry.ending_book_value,
        )

    def to_schedule_entry(self) -> ScheduleEntry:
        return ScheduleEntry(
            year=self.year,
            beginning_book_value=self.beginning_book_value,
            depreciation_expense=self.depreciation_expense,
            accumulated_depreciation=self.accumulated_depreciation,
            ending_book_value=self.ending_book_value,
        )

    def __repr__(self):
        return f'<DepreciationEntry asset={self.asset_id} year={self.year}>'
