"""Models for test suites, as authored by users and loaded from suite files."""

from collections.abc import Sequence
from enum import StrEnum
from typing import Literal

from pydantic import Field, model_validator

from suite_runner.models.base import Model

Priority = Literal["Low", "Medium", "High"]
Role = Literal["ADMIN", "MEMBER", "OBSERVER"]
ApplicationType = Literal["WEB", "DESKTOP", "FILE"]


class ExecutionMode(StrEnum):
    """How the cases of a run receive their verdicts."""

    MANUAL = "MANUAL"
    AUTOMATED = "AUTOMATED"


class TestStep(Model):
    """Single action of a test case and the result it should produce."""

    __test__ = False

    id: str = Field(..., description="Step identifier")
    action: str = Field(..., description="Atomic user action")
    expected_result: str = Field(..., description="Expected system reaction")


class TestCase(Model):
    """Test case with its ordered steps."""

    __test__ = False

    id: str = Field(..., description="Case identifier, unique within the suite")
    title: str = Field(..., description="Human-readable case title")
    description: str = Field(default="", description="Purpose of the case")
    priority: Priority = Field(default="Medium", description="Case priority")
    steps: Sequence[TestStep] = Field(
        default_factory=list, description="Ordered steps of the case"
    )
    preconditions: str = Field(
        default="", description="State required before the case can run"
    )
    test_data: str = Field(default="", description="Sample input data for the case")


class RunEnvironmentContext(Model):
    """Target environment handed to the execution oracle."""

    application_type: ApplicationType = Field(
        default="WEB", description="Kind of application under test"
    )
    address: str = Field(default="", description="URL, host or file of the target")
    test_account: str | None = Field(default=None, description="Login used by tests")
    test_password: str | None = Field(
        default=None, description="Password for the test account"
    )
    asset_names: Sequence[str] = Field(
        default_factory=list,
        description="File names available to the tests",
    )

    def describe(self) -> str:
        """Render the context as the multi-line text given to the oracle.

        The first line always names the application type and target, the
        following lines list credentials and assets.
        """
        lines = [f"{self.application_type} at {self.address or 'Unknown Address'}"]
        lines.append(f"[Credentials] Valid ID: {self.test_account or '(Not Provided)'}")
        lines.append(
            f"[Credentials] Valid Password: {self.test_password or '(Not Provided)'}"
        )
        for asset_name in self.asset_names:
            lines.append(f"[File] Available asset: {asset_name}")
        return "\n".join(lines)


class SuiteMember(Model):
    """Account authorized on a suite."""

    user_id: str = Field(..., description="Account identifier")
    role: Role = Field(default="MEMBER", description="Role within the suite")


class TestSuite(Model):
    """Ordered collection of test cases sharing a permission scope."""

    __test__ = False

    id: str = Field(..., description="Suite identifier")
    name: str = Field(..., description="Human-readable suite name")
    description: str = Field(default="", description="Suite description")
    cases: Sequence[TestCase] = Field(
        default_factory=list, description="Ordered test cases"
    )
    execution_mode: ExecutionMode = Field(
        default=ExecutionMode.MANUAL, description="Execution mode for runs"
    )
    environment: RunEnvironmentContext = Field(
        default_factory=RunEnvironmentContext,
        description="Target environment for automated runs",
    )
    members: Sequence[SuiteMember] = Field(
        default_factory=list, description="Accounts authorized on the suite"
    )

    @model_validator(mode="after")
    def _check_unique_case_ids(self) -> "TestSuite":
        seen: set[str] = set()
        duplicates = []
        for case in self.cases:
            if case.id in seen:
                duplicates.append(case.id)
            seen.add(case.id)
        if duplicates:
            raise ValueError(f"Duplicate case ids in suite {self.id}: {duplicates}")
        return self
