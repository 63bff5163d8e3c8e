# le_dashboard/services/analytics.py
import logging
from collections import OrderedDict

from le_dashboard.models import Client, Job
from le_dashboard.services.date_utils import month_key

logger = logging.getLogger(__name__)

LIVE_STATUSES = ('OPEN', 'IN_PROGRESS')


def _job_value(job):
    return float(job.cost_nett or 0)


def _percentage(part, whole):
    return round(part / whole * 100, 1) if whole else 0


def get_performance_summary():
    """Figures for the performance dashboard: status, department, client and monthly breakdowns."""
    jobs = Job.query.all()
    clients = Client.query.filter(Client.active.is_(True)).all()

    status_counts = {}
    department_stats = {}
    monthly = {}
    total_revenue = 0.0
    completed_jobs = 0

    for job in jobs:
        value = _job_value(job)
        total_revenue += value
        if job.job_complete:
            completed_jobs += 1

        status_counts[job.job_status] = status_counts.get(job.job_status, 0) + 1

        dept = department_stats.setdefault(
            job.department or 'UNKNOWN', {'count': 0, 'revenue': 0.0, 'completed': 0}
        )
        dept['count'] += 1
        dept['revenue'] += value
        if job.job_complete:
            dept['completed'] += 1

        key = month_key(job.date or job.created_at)
        if key:
            bucket = monthly.setdefault(key, {'month': key, 'revenue': 0.0, 'jobs': 0})
            bucket['revenue'] += value
            bucket['jobs'] += 1

    for stats in list(department_stats.values()) + list(monthly.values()):
        stats['revenue'] = round(stats['revenue'], 2)

    jobs_by_client = {}
    for job in jobs:
        if job.client_id is not None:
            jobs_by_client.setdefault(job.client_id, []).append(job)

    client_value = []
    for client in clients:
        client_jobs = jobs_by_client.get(client.id, [])
        client_value.append({
            'id': client.id,
            'name': client.company_name,
            'value': round(sum(_job_value(j) for j in client_jobs), 2),
            'jobCount': len(client_jobs),
            'completionRate': _percentage(sum(1 for j in client_jobs if j.job_complete), len(client_jobs)),
        })
    client_value.sort(key=lambda c: c['value'], reverse=True)

    total_jobs = len(jobs)
    summary = {
        'totalJobs': total_jobs,
        'totalClients': len(clients),
        'statusCounts': status_counts,
        'departmentStats': department_stats,
        'clientValue': client_value,
        'monthlyRevenue': list(OrderedDict(sorted(monthly.items())).values()),
        'totalRevenue': round(total_revenue, 2),
        'completionRate': _percentage(completed_jobs, total_jobs),
        'avgJobValue': round(total_revenue / total_jobs, 2) if total_jobs else 0,
    }
    logger.debug(f"Performance summary computed over {total_jobs} jobs")
    return summary


def get_overview_summary():
    """Headline numbers for the home dashboard."""
    live_jobs = Job.query.filter(Job.job_status.in_(LIVE_STATUSES)).count()
    not_invoiced = Job.query.filter(
        Job.job_status == 'COMPLETED',
        Job.invoiced.isnot(True),
    ).all()
    pending_applications = Client.query.filter(
        Client.active.is_(True),
        Client.status == 'pending',
    ).count()

    return {
        'liveJobs': live_jobs,
        'completedNotInvoiced': len(not_invoiced),
        'totalAmountNotInvoiced': round(sum(_job_value(j) for j in not_invoiced), 2),
        'pendingApplications': pending_applications,
    }
