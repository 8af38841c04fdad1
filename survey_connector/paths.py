"""
Form resource paths
Splits an ODK Central OData service path into server, project and form parts
"""

from typing import NamedTuple

from .errors import MalformedResourceIdentifier

SERVICE_SUFFIX = '.svc'


class FormResource(NamedTuple):
    """Location of one form's OData service on an ODK Central server"""
    base_url: str
    project_id: str
    form_id: str

    @property
    def resource_path(self) -> str:
        """Rebuild the OData service path this resource was parsed from"""
        return f"{self.base_url}/projects/{self.project_id}/forms/{self.form_id}.svc"

    def media_url(self, row_token: str, filename: str) -> str:
        """
        Build the download URL of a submission attachment

        Args:
            row_token: Submission uuid without its "uuid:" prefix
            filename: Attachment file name as stored in the submission

        Returns:
            Absolute attachment URL
        """
        return (
            f"{self.base_url}/projects/{self.project_id}/forms/{self.form_id}"
            f"/Submissions/uuid:{row_token}/attachments/{filename}"
        )


def parse_resource_path(resource_path: str) -> FormResource:
    """
    Parse a path such as https://host/v1/projects/5/forms/survey.svc

    Args:
        resource_path: OData service path of a form

    Returns:
        FormResource with base URL, project id and form id

    Raises:
        MalformedResourceIdentifier: if the path lacks the projects/<id>/forms/<id> tail
    """
    if not isinstance(resource_path, str) or not resource_path.strip():
        raise MalformedResourceIdentifier(str(resource_path), "empty path")

    segments = resource_path.strip().rstrip('/').split('/')

    if 'projects' not in segments:
        raise MalformedResourceIdentifier(resource_path, "no 'projects' segment")

    projects_at = len(segments) - 1 - segments[::-1].index('projects')
    tail = segments[projects_at:]
    if len(tail) != 4 or tail[2] != 'forms' or not tail[3].endswith(SERVICE_SUFFIX):
        raise MalformedResourceIdentifier(
            resource_path, "expected projects/<projectId>/forms/<formId>.svc"
        )

    base_url = '/'.join(segments[:projects_at])
    project_id = tail[1]
    form_id = tail[3][:-len(SERVICE_SUFFIX)]

    if not form_id:
        raise MalformedResourceIdentifier(resource_path, "empty form id")

    return FormResource(base_url=base_url, project_id=project_id, form_id=form_id)


def build_resource_path(base_url: str, project_id, form_id: str) -> str:
    """Compose a form's OData service path from configuration values"""
    return FormResource(base_url.rstrip('/'), str(project_id), form_id).resource_path
