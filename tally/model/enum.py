import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Test = "test"
    Local = "local"


class PublishStatus(enum.Enum):
    """Whether a quiz or assignment is open to students."""

    Active = "active"
    Inactive = "inactive"
    Draft = "draft"
