"""Centralized mock data for development and testing.

Used by data_tools when the learning-data backend is not available.
Entries use the backend's DTO shape so they go through the same adapter.
"""

STUDENT_METRICS = {
    "s-001": {
        "studentId": "s-001",
        "gradeLevel": 5,
        "windowDays": 30,
        "capturedAt": "2026-03-02T08:00:00Z",
        "engagement": {
            "totalSessions": 28,
            "averageSessionMinutes": 24.5,
            "lastActivityAt": "2026-03-01T17:30:00Z",
            "currentStreak": 9,
            "longestStreak": 12,
            "sessionCompletionRate": 0.92,
        },
        "performance": {
            "totalAttempts": 240,
            "correctAttempts": 214,
            "averageAccuracy": 89.0,
            "accuracyTrend": 2.5,
            "difficultyLevel": 7,
        },
        "learning": {
            "topicsStarted": 14,
            "topicsCompleted": 12,
            "reviewsCompleted": 40,
            "reviewsDue": 3,
            "helpRequests": 2,
            "timePerQuestionRatio": 0.9,
        },
        "behavior": {
            "interruptions": 1,
            "habitsCompleted": 26,
            "habitsTotal": 30,
            "averageFocusScore": 88,
            "frustrationEvents": 0,
        },
        "social": {
            "groupParticipation": 5,
            "peerHelpGiven": 12,
            "peerHelpReceived": 4,
            "challengesParticipated": 3,
        },
        "studyTimeMinutes": 686,
    },
    "s-002": {
        "studentId": "s-002",
        "gradeLevel": 5,
        "windowDays": 30,
        "capturedAt": "2026-03-02T08:00:00Z",
        "engagement": {
            "totalSessions": 12,
            "averageSessionMinutes": 15.0,
            "lastActivityAt": "2026-02-26T19:00:00Z",
            "currentStreak": 1,
            "longestStreak": 6,
            "sessionCompletionRate": 0.55,
        },
        "performance": {
            "totalAttempts": 90,
            "correctAttempts": 55,
            "averageAccuracy": 61.0,
            "accuracyTrend": -6.0,
            "difficultyLevel": 4,
        },
        "learning": {
            "topicsStarted": 10,
            "topicsCompleted": 4,
            "reviewsCompleted": 8,
            "reviewsDue": 14,
            "helpRequests": 5,
            "timePerQuestionRatio": 2.6,
        },
        "behavior": {
            "interruptions": 4,
            "habitsCompleted": 12,
            "habitsTotal": 30,
            "averageFocusScore": 58,
            "frustrationEvents": 20,
        },
        "social": {
            "groupParticipation": 1,
            "peerHelpGiven": 0,
            "peerHelpReceived": 2,
        },
        "studyTimeMinutes": 180,
    },
    "s-003": {
        "studentId": "s-003",
        "gradeLevel": 5,
        "windowDays": 30,
        "capturedAt": "2026-03-02T08:00:00Z",
        "engagement": {
            "totalSessions": 3,
            "lastActivityAt": "2026-02-19T15:00:00Z",
            "currentStreak": 0,
            "longestStreak": 4,
            "sessionCompletionRate": 0.3,
        },
        "performance": {
            "totalAttempts": 25,
            "correctAttempts": 9,
            "averageAccuracy": 36.0,
            "accuracyTrend": -18.0,
            "difficultyLevel": 3,
        },
        "learning": {
            "topicsStarted": 6,
            "topicsCompleted": 1,
            "reviewsCompleted": 2,
            "reviewsDue": 22,
            "helpRequests": 3,
            "timePerQuestionRatio": 3.5,
        },
        "behavior": {
            "interruptions": 2,
            "habitsCompleted": 3,
            "habitsTotal": 30,
            "averageFocusScore": 41,
            "frustrationEvents": 14,
        },
        "social": {},
        "studyTimeMinutes": 35,
    },
}
