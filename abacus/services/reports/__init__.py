from .depreciation_report_service import DepreciationReportService, DashboardStats, AnnualSummary
