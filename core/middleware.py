import logging

from django.db import connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class HealthCheckMiddleware:
    """
    Answers health check requests before the rest of the stack runs.

    Endpoints:
    - /health/ - Basic health check (for load balancers)
    - /health/ready/ - Readiness check (includes the database)
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path in ['/health/', '/health', '/health/live/', '/health/live']:
            return JsonResponse({'status': 'healthy'})

        if request.path in ['/health/ready/', '/health/ready']:
            return self._readiness_check()

        return self.get_response(request)

    def _readiness_check(self):
        database = self._check_database()
        status = 200 if database['status'] == 'healthy' else 503
        return JsonResponse({'status': database['status'], 'checks': {'database': database}}, status=status)

    def _check_database(self):
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
            return {'status': 'healthy'}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {'status': 'unhealthy', 'error': str(e)}
