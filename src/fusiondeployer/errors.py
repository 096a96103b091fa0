"""Domain errors for fusiondeployer."""


class DeployerError(RuntimeError):
    """Raised when the deployment cannot continue safely."""
