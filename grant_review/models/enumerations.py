from enum import Enum

class CallStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    IN_ASSESSMENT = "in_assessment"
    COMPLETED = "completed"
    ARCHIVED = "archived"

class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    WITHDRAWN = "withdrawn"
    REOPENED = "reopened"

class AssignmentStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    RETURNED = "returned"      # Sent back for revision after coordinator review

class AssessmentStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    RETURNED = "returned"      # Reopened by a coordinator, editable like a draft

class DistributionStrategy(str, Enum):
    ROUND_ROBIN = "round_robin"
    RANDOM = "random"
    BALANCED = "balanced"

class RankingBasis(str, Enum):
    TOTAL = "total"
    WEIGHTED = "weighted"

class MissingWeightedPolicy(str, Enum):
    IGNORE_MISSING = "ignore_missing"               # Average only assessors with a weighted total
    TREAT_MISSING_AS_ZERO = "treat_missing_as_zero" # Missing weighted totals count as 0
