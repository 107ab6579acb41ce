class ApiGenError(Exception):
    pass


class ConfigurationError(ApiGenError):
    """A required descriptor field is absent or malformed."""


class ResourceNotFoundError(ApiGenError):
    """A table named by the naming convention cannot be located."""

    def __init__(self, resource_constant, table_name=None):
        self.resource_constant = resource_constant
        self.table_name = table_name
        if table_name:
            message = f"table '{table_name}' ({resource_constant}) not found"
        else:
            message = f"naming convention returned no name for '{resource_constant}'"
        super().__init__(message)


class PartialProvisioningFailure(ApiGenError):
    """One or more endpoints failed after others were already dispatched."""

    def __init__(self, failures):
        # endpoint name -> exception, in endpoint order
        self.failures = dict(failures)
        names = ", ".join(self.failures)
        super().__init__(f"provisioning failed for endpoint(s): {names}")
