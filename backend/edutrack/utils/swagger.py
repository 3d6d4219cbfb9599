"""Swagger/OpenAPI configuration for the application."""

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

SWAGGER_UI_CONFIG = {
    'app_name': "EduTrack API",
    'defaultModelsExpandDepth': -1,
    'defaultModelExpandDepth': 1,
    'docExpansion': 'list',
    'filter': True,
    'supportedSubmitMethods': ['get', 'post', 'patch'],
    'validatorUrl': None,
}

def _ref(name):
    return {"$ref": f"#/components/schemas/{name}"}

def _json(schema):
    return {"application/json": {"schema": schema}}

def _body(required, properties):
    return {
        "required": True,
        "content": _json({
            "type": "object",
            "required": required,
            "properties": properties
        })
    }

def _responses(success_code="200", success="Success", **errors):
    """Build a response map. ``errors`` maps ``e404='Session not found'`` style keys."""
    responses = {success_code: {"description": success, "content": _json(_ref("Success"))}}
    for key, description in errors.items():
        responses[key.lstrip('e')] = {"description": description, "content": _json(_ref("Error"))}
    return responses

def _operation(tag, summary, secured=True, body=None, parameters=None, **responses):
    operation = {
        "tags": [tag],
        "summary": summary,
        "responses": responses or _responses()
    }
    if secured:
        operation["security"] = [{"bearerAuth": []}]
    if body:
        operation["requestBody"] = body
    if parameters:
        operation["parameters"] = parameters
    return operation

def _path_id(name):
    return [{"name": name, "in": "path", "required": True, "schema": {"type": "integer"}}]

def _query(name, schema_type="string"):
    return {"name": name, "in": "query", "required": False, "schema": {"type": schema_type}}

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    mark_fields = ["mid_sem_1", "mid_sem_2", "end_sem", "assignment"]

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "EduTrack API",
            "description": "Geo-verified attendance, marks publishing, risk alerts and progress reports",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000/api",
                "description": "Development server"
            }
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "User": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "email": {"type": "string", "format": "email"},
                        "name": {"type": "string"},
                        "role": {"type": "string", "enum": ["student", "teacher", "admin"]},
                        "department": {"type": "string"},
                        "year": {"type": "integer", "nullable": True},
                        "years_taught": {"type": "array", "items": {"type": "integer"}, "nullable": True},
                        "subject": {"type": "string", "nullable": True}
                    }
                },
                "AttendanceSession": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "session_code": {"type": "string", "example": "190526-A1B2"},
                        "subject": {"type": "string"},
                        "teacher_id": {"type": "integer"},
                        "session_date": {"type": "string", "format": "date"},
                        "start_time": {"type": "string", "format": "date-time"},
                        "end_time": {"type": "string", "format": "date-time", "nullable": True},
                        "is_active": {"type": "boolean"},
                        "location": {
                            "type": "object",
                            "properties": {
                                "latitude": {"type": "number"},
                                "longitude": {"type": "number"}
                            }
                        }
                    }
                },
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "student_id": {"type": "integer"},
                        "date": {"type": "string", "format": "date"},
                        "status": {"type": "string", "enum": ["present", "absent", "late"]},
                        "session_id": {"type": "integer", "nullable": True},
                        "distance_meters": {"type": "number", "nullable": True}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": True},
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"},
                        "code": {"type": "string"},
                        "data": {"type": "object"}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": False},
                        "message": {"type": "string"},
                        "data": {"type": "object"}
                    }
                }
            }
        },
        "paths": {
            "/auth/register": {
                "post": _operation(
                    "Authentication", "Register a student or teacher", secured=False,
                    body=_body(["email", "password", "name", "department", "role"], {
                        "email": {"type": "string", "format": "email"},
                        "password": {"type": "string", "minLength": 6},
                        "name": {"type": "string", "minLength": 2},
                        "role": {"type": "string", "enum": ["student", "teacher"]},
                        "department": {"type": "string"},
                        "year": {"type": "integer", "minimum": 1, "maximum": 4},
                        "years_taught": {"type": "array", "items": {"type": "integer"}},
                        "subject": {"type": "string"}
                    }),
                    **_responses("201", "User created", e400="Validation error", e409="Email already exists")
                )
            },
            "/auth/login": {
                "post": _operation(
                    "Authentication", "User login", secured=False,
                    body=_body(["email", "password"], {
                        "email": {"type": "string", "format": "email"},
                        "password": {"type": "string"}
                    }),
                    **_responses(success="Login successful", e401="Invalid credentials")
                )
            },
            "/auth/me": {
                "get": _operation("Authentication", "Current user profile",
                                  **_responses(e401="Unauthorized"))
            },
            "/auth/refresh": {
                "post": _operation("Authentication", "Exchange a refresh token for new tokens",
                                   **_responses(e401="Unauthorized"))
            },
            "/sessions/": {
                "post": _operation(
                    "Sessions", "Open an attendance session at the teacher's location",
                    body=_body(["latitude", "longitude"], {
                        "subject": {"type": "string"},
                        "latitude": {"type": "number"},
                        "longitude": {"type": "number"}
                    }),
                    **_responses("201", "Session started with QR image",
                                 e400="Location unavailable", e409="Session already active")
                )
            },
            "/sessions/active": {
                "get": _operation("Sessions", "Today's active session with attendees")
            },
            "/sessions/{session_id}/close": {
                "patch": _operation("Sessions", "Close a session", parameters=_path_id("session_id"),
                                    **_responses(e403="Not the session owner", e404="Session not found"))
            },
            "/sessions/history": {
                "get": _operation("Sessions", "Session history grouped by date",
                                  parameters=[_query("limit", "integer")])
            },
            "/sessions/history/export": {
                "get": _operation("Sessions", "Session history as CSV",
                                  **{"200": {"description": "CSV file", "content": {"text/csv": {}}}})
            },
            "/attendance/mark": {
                "post": _operation(
                    "Attendance", "Mark today's attendance with a session code",
                    body=_body(["session_code", "latitude", "longitude"], {
                        "session_code": {"type": "string"},
                        "latitude": {"type": "number"},
                        "longitude": {"type": "number"}
                    }),
                    **_responses(success="Attendance marked",
                                 e400="Location unavailable",
                                 e403="Outside the allowed radius",
                                 e404="Session not found",
                                 e409="Already marked today")
                )
            },
            "/attendance/me": {
                "get": _operation("Attendance", "Own attendance summary")
            },
            "/attendance/manual": {
                "post": _operation(
                    "Attendance", "Teacher sets a student's status for a day",
                    body=_body(["student_id", "date", "status"], {
                        "student_id": {"type": "integer"},
                        "date": {"type": "string", "format": "date"},
                        "status": {"type": "string", "enum": ["present", "absent", "late"]}
                    }),
                    **_responses(success="Attendance updated", e400="Validation error",
                                 e404="Student not found")
                )
            },
            "/performance/publish": {
                "post": _operation(
                    "Performance", "Publish one mark component",
                    body=_body(["subject_name", "field", "marks"], {
                        "subject_name": {"type": "string"},
                        "field": {"type": "string", "enum": mark_fields},
                        "marks": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "student_id": {"type": "integer"},
                                    "value": {"type": "number"}
                                }
                            }
                        }
                    }),
                    **_responses(success="Published and skipped entries",
                                 e400="Validation error", e403="Subject not assigned")
                )
            },
            "/performance/engagement": {
                "patch": _operation(
                    "Performance", "Update a student's engagement score",
                    body=_body(["student_id", "subject_name", "engagement_score"], {
                        "student_id": {"type": "integer"},
                        "subject_name": {"type": "string"},
                        "engagement_score": {"type": "number", "minimum": 0, "maximum": 100}
                    }),
                    **_responses(e400="Validation error", e403="Subject not assigned",
                                 e404="Student not found")
                )
            },
            "/performance/": {
                "get": _operation("Performance", "Records for the teacher's subject",
                                  parameters=[_query("subject")])
            },
            "/performance/statistics": {
                "get": _operation("Performance", "Class statistics and grade distribution",
                                  parameters=[_query("subject")])
            },
            "/performance/export": {
                "get": _operation("Performance", "Subject marks as CSV", parameters=[_query("subject")],
                                  **{"200": {"description": "CSV file", "content": {"text/csv": {}}}})
            },
            "/performance/me": {
                "get": _operation("Performance", "Own marks with grades")
            },
            "/risk/alerts": {
                "get": _operation("Risk", "Medium and high risk students")
            },
            "/risk/students": {
                "get": _operation("Risk", "Roster of the teacher's students with standings",
                                  parameters=[_query("search"), _query("risk_level"), _query("sort_by")],
                                  **_responses(e400="Invalid risk level or sort order"))
            },
            "/risk/students/{student_id}": {
                "get": _operation("Risk", "Risk assessment for one student",
                                  parameters=_path_id("student_id"),
                                  **_responses(e404="Student not found"))
            },
            "/reports/generate": {
                "post": _operation(
                    "Reports", "Generate a progress report",
                    body=_body(["student_id"], {"student_id": {"type": "integer"}}),
                    **_responses("201", "Report generated", e400="Invalid student ID", e404="Student not found")
                )
            },
            "/reports/me": {
                "get": _operation("Reports", "Own progress reports")
            },
            "/notifications/": {
                "get": _operation("Notifications", "Latest notifications",
                                  parameters=[_query("unread_only", "boolean")])
            },
            "/notifications/{notification_id}/read": {
                "patch": _operation("Notifications", "Mark a notification read",
                                    parameters=_path_id("notification_id"),
                                    **_responses(e404="Notification not found"))
            }
        }
    }
