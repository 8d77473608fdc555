"""
Endpoint clients, one per Canvas resource.

``CanvasClient`` resolves ``client.<name>`` to ``<Name>Client`` in this
package, so ``client.module_items`` maps to ``ModuleItemsClient``.
"""

from canvas_client.endpoints.assignments import AssignmentsClient, SubmissionsClient
from canvas_client.endpoints.courses import CoursesClient
from canvas_client.endpoints.enrollments import EnrollmentsClient
from canvas_client.endpoints.modules import ModuleItemsClient, ModulesClient
from canvas_client.endpoints.rubrics import RubricsClient
from canvas_client.endpoints.users import UsersClient

__all__ = [
    "AssignmentsClient",
    "CoursesClient",
    "EnrollmentsClient",
    "ModuleItemsClient",
    "ModulesClient",
    "RubricsClient",
    "SubmissionsClient",
    "UsersClient",
]
