"""
Roles and Permissions Configuration
This config defines the three Lumos roles and the permissions each one grants.
Used by require_permission and by /auth/me to tell the frontend what to show.
"""

ROLES = ("student", "volunteer", "teacher")

# Define modules and their actions
MODULES = {
    "help_requests": {
        "resource": "help_requests",
        "actions": ["create", "cancel"],
        "description": "Ask the timebank for a tutor"
    },
    "tutoring": {
        "resource": "tutoring",
        "actions": ["match", "deliver"],
        "description": "Match with students and run tutoring sessions"
    },
    "resources": {
        "resource": "resources",
        "actions": ["manage"],
        "description": "Subject, topic and video catalog"
    },
    "academic": {
        "resource": "academic",
        "actions": ["read", "write"],
        "description": "Projects, study plans and AI analysis"
    },
    "credits": {
        "resource": "credits",
        "actions": ["read", "topup"],
        "description": "Credit wallet"
    }
}

# Additional descriptions for specific actions
MODULE_SPECIFIC_PERMISSIONS = {
    "tutoring": {
        "match": "Look for students waiting for help",
        "deliver": "Start and end tutoring sessions"
    },
    "resources": {
        "manage": "Create and edit catalog entries"
    }
}

ROLE_PERMISSIONS = {
    "student": [
        "help_requests:create", "help_requests:cancel",
        "academic:read", "academic:write",
        "credits:read", "credits:topup",
    ],
    "volunteer": [
        "tutoring:match", "tutoring:deliver",
        "academic:read", "academic:write",
        "credits:read", "credits:topup",
    ],
    "teacher": [
        "tutoring:match", "tutoring:deliver",
        "resources:manage",
        "academic:read", "academic:write",
        "credits:read", "credits:topup",
    ],
}

ROLE_DESCRIPTIONS = {
    "student": "Learner who asks for help and spends credits",
    "volunteer": "Tutor who earns credits by helping students",
    "teacher": "Educator who tutors and curates learning resources",
}


def get_permission_matrix():
    """
    Returns every permission and the roles that carry them
    Format: {
        "permissions": [
            {"name": "tutoring:match", "resource": "tutoring", "action": "match", "description": "..."},
            ...
        ],
        "roles": [
            {"name": "volunteer", "description": "...", "permissions": ["tutoring:match", ...]},
            ...
        ]
    }
    """
    permissions = []
    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if action in MODULE_SPECIFIC_PERMISSIONS.get(module_name, {}):
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    roles = [
        {
            "name": role,
            "description": ROLE_DESCRIPTIONS[role],
            "permissions": list(ROLE_PERMISSIONS[role])
        }
        for role in ROLES
    ]
    return {"permissions": permissions, "roles": roles}


def get_role_permissions(role):
    """Permission names granted to a role; unknown or missing role gets none"""
    return list(ROLE_PERMISSIONS.get(role, []))


PERMISSION_MATRIX = get_permission_matrix()
