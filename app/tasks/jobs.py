from app.tasks.celery_app import celery
from app.tasks import worker_jobs

@celery.task(name="app.tasks.jobs.complete_finished_bookings")
def complete_finished_bookings():
    return worker_jobs.complete_finished_bookings()
