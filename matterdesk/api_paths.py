BASE_URL = "https://taskmanager-on78.onrender.com/"


class AuthPaths:
    REGISTER = "/api/auth/register"
    LOGIN = "/api/auth/login"  # returns the JWT alongside the user payload
    GET_PROFILE = "/api/auth/profile"
    UPDATE_PROFILE = "/api/auth/profile"
    RESET_WITH_ADMIN_TOKEN = "/api/auth/reset-password/admin-token"
    UPLOAD_IMAGE = "/api/auth/upload-image"


class UserPaths:
    GET_ALL = "/api/users"  # admin only
    CREATE = "/api/users"

    @staticmethod
    def by_id(user_id: str) -> str:
        return f"/api/users/{user_id}"

    @staticmethod
    def reset_password(user_id: str) -> str:
        return f"/api/users/{user_id}/password"


class ProfilePaths:
    PHOTO = "/api/users/profile/photo"
    CHANGE_PASSWORD = "/api/users/profile/password"


class TaskPaths:
    DASHBOARD_DATA = "/api/tasks/dashboard-data"
    USER_DASHBOARD_DATA = "/api/tasks/user-dashboard-data"
    NOTIFICATIONS = "/api/tasks/notifications"
    GET_ALL = "/api/tasks"  # admins see every task, members only their own
    CREATE = "/api/tasks"

    @staticmethod
    def by_id(task_id: str) -> str:
        return f"/api/tasks/{task_id}"

    @staticmethod
    def status(task_id: str) -> str:
        return f"/api/tasks/{task_id}/status"

    @staticmethod
    def todo(task_id: str) -> str:
        return f"/api/tasks/{task_id}/todo"

    @staticmethod
    def documents(task_id: str) -> str:
        return f"/api/tasks/{task_id}/documents"


class NoticePaths:
    PUBLISH = "/api/notices"
    GET_ACTIVE = "/api/notices/active"
    GET_ALL = "/api/notices"

    @staticmethod
    def by_id(notice_id: str) -> str:
        return f"/api/notices/{notice_id}"


class MatterPaths:
    GET_ALL = "/api/matters"
    GET_CLIENTS = "/api/matters/clients"
    CREATE = "/api/matters"

    @staticmethod
    def by_id(matter_id: str) -> str:
        return f"/api/matters/{matter_id}"


class CasePaths:
    GET_ALL = "/api/cases"
    CREATE = "/api/cases"

    @staticmethod
    def by_id(case_id: str) -> str:
        return f"/api/cases/{case_id}"

    @staticmethod
    def documents(case_id: str) -> str:
        return f"/api/cases/{case_id}/documents"


class DocumentPaths:
    GET_ALL = "/api/documents"
    CREATE = "/api/documents"

    @staticmethod
    def by_id(document_id: str) -> str:
        return f"/api/documents/{document_id}"


class InvoicePaths:
    GET_ALL = "/api/invoices"
    CREATE = "/api/invoices"

    @staticmethod
    def by_id(invoice_id: str) -> str:
        return f"/api/invoices/{invoice_id}"


class ReportPaths:
    EXPORT_TASKS = "/api/reports/export/tasks"
    EXPORT_USERS = "/api/reports/export/users"


class API_PATHS:
    AUTH = AuthPaths
    USERS = UserPaths
    PROFILE = ProfilePaths
    TASKS = TaskPaths
    NOTICES = NoticePaths
    MATTERS = MatterPaths
    CASES = CasePaths
    DOCUMENTS = DocumentPaths
    INVOICES = InvoicePaths
    REPORTS = ReportPaths
