"""
Cloud service detectors for AWS, Azure and GCP.

Each detector is a pure function ``(path, content) -> list[CloudServiceDetection]``
that ignores files it does not understand. Detectors are grouped per
provider in ``AWS_DETECTORS``, ``AZURE_DETECTORS`` and ``GCP_DETECTORS``.

All pattern scanning goes through ``re.finditer`` on compiled patterns,
which keeps no scan position between calls.
"""

import re

from repo_grader.dedup import cloud_key, unique_by
from repo_grader.manifests import NPM_DEPENDENCY_SECTIONS, basename, dependency_map, load_json_object
from repo_grader.schemas import CloudServiceDetection
from repo_grader.service_maps import (
    ARM_NAMESPACE_TO_SERVICE,
    BOTO3_TO_SERVICE,
    CLIENT_TO_SERVICE,
    TF_AZURERM_TO_SERVICE,
    TF_GOOGLE_TO_SERVICE,
    TF_PREFIX_TO_SERVICE,
    lookup_resource_prefix,
    lookup_service,
    title_case,
)

AWS_SDK_V3_PATTERN = re.compile(r"^@aws-sdk/client-(.+)$")
AWS_CDK_PATTERN = re.compile(r"^(?:@aws-cdk/aws-|aws-cdk-lib/aws-)(.+)$")
BOTO3_CLIENT_PATTERN = re.compile(
    r"""(?:boto3|session)\s*\.\s*(?:client|resource)\s*\(\s*['"]([^'"]+)['"]"""
)
CFN_FILE_PATTERN = re.compile(r"\.(?:ya?ml|json|template)$")
CFN_RESOURCE_PATTERN = re.compile(r"AWS::(\w+)::\w+")

TERRAFORM_AWS_PATTERN = re.compile(r'(?:resource|data)\s+"aws_([a-z0-9]+(?:_[a-z0-9]+)*)"')
TERRAFORM_AZURERM_PATTERN = re.compile(r'(?:resource|data)\s+"azurerm_([a-z0-9]+(?:_[a-z0-9]+)*)"')
TERRAFORM_GOOGLE_PATTERN = re.compile(r'(?:resource|data)\s+"google_([a-z0-9]+(?:_[a-z0-9]+)*)"')

ARM_NAMESPACE_PATTERN = re.compile(r'"(Microsoft\.\w+)')
BICEP_NAMESPACE_PATTERN = re.compile(r"'(Microsoft\.\w+)")
AZURE_NPM_PATTERN = re.compile(r"^@azure/(.+)$")
AZURE_PYTHON_PATTERN = re.compile(r"azure[_-][\w-]+", re.IGNORECASE)
AZURE_PYTHON_PREFIX = re.compile(r"^azure[_-]")

GCP_NPM_PATTERN = re.compile(r"^@google-cloud/(.+)$")
GCP_PYTHON_PATTERN = re.compile(r"google-cloud-[\w-]+", re.IGNORECASE)

AWS_SDK_V2_SERVICE = "AWS SDK v2 (general)"


def _is_package_json(path: str) -> bool:
    return basename(path) == "package.json"


def _is_python_manifest(path: str) -> bool:
    name = basename(path)
    return name.endswith("requirements.txt") or name in ("pyproject.toml", "Pipfile")


def _npm_dependency_names(path: str, content: str) -> list[str]:
    if not _is_package_json(path):
        return []
    manifest = load_json_object(path, content)
    if manifest is None:
        return []
    return list(dependency_map(manifest, NPM_DEPENDENCY_SECTIONS))


def _detection(service: str, path: str, via: str, sdk_package: str | None = None) -> CloudServiceDetection:
    return CloudServiceDetection(service=service, sdk_package=sdk_package, source=path, via=via)


def _unique(detections: list[CloudServiceDetection]) -> list[CloudServiceDetection]:
    return unique_by(detections, cloud_key)


def _terraform(path: str, content: str, pattern: re.Pattern, table) -> list[CloudServiceDetection]:
    if not path.endswith(".tf"):
        return []
    return _unique([
        _detection(lookup_resource_prefix(table, m.group(1)), path, "terraform")
        for m in pattern.finditer(content)
    ])


# --- AWS ---


def detect_aws_js_sdk_v3(path: str, content: str) -> list[CloudServiceDetection]:
    """Modular JavaScript SDK clients: ``@aws-sdk/client-<service>``."""
    results = []
    for dep in _npm_dependency_names(path, content):
        match = AWS_SDK_V3_PATTERN.match(dep)
        if match:
            service = lookup_service(CLIENT_TO_SERVICE, match.group(1))
            results.append(_detection(service, path, "js-sdk-v3", sdk_package=dep))
    return _unique(results)


def detect_aws_js_sdk_v2(path: str, content: str) -> list[CloudServiceDetection]:
    """The monolithic ``aws-sdk`` package, reported as one general entry."""
    if "aws-sdk" in _npm_dependency_names(path, content):
        return [_detection(AWS_SDK_V2_SERVICE, path, "js-sdk-v2", sdk_package="aws-sdk")]
    return []


def detect_aws_cdk(path: str, content: str) -> list[CloudServiceDetection]:
    """CDK construct libraries: ``@aws-cdk/aws-*`` and ``aws-cdk-lib/aws-*``."""
    results = []
    for dep in _npm_dependency_names(path, content):
        match = AWS_CDK_PATTERN.match(dep)
        if match:
            service = lookup_service(CLIENT_TO_SERVICE, match.group(1))
            results.append(_detection(service, path, "cdk", sdk_package=dep))
    return _unique(results)


def detect_aws_boto3(path: str, content: str) -> list[CloudServiceDetection]:
    """In-code client construction: ``boto3.client('s3')``, ``session.resource("dynamodb")``."""
    if not path.endswith(".py"):
        return []
    results = []
    for match in BOTO3_CLIENT_PATTERN.finditer(content):
        service_id = match.group(1)
        service = lookup_service(BOTO3_TO_SERVICE, service_id)
        results.append(_detection(service, path, "boto3", sdk_package=f"boto3:{service_id}"))
    return _unique(results)


def detect_aws_cloudformation(path: str, content: str) -> list[CloudServiceDetection]:
    """CloudFormation resource types ``AWS::<Service>::<Type>``; the service is reported as written."""
    if not CFN_FILE_PATTERN.search(path):
        return []
    return _unique([
        _detection(match.group(1), path, "cloudformation")
        for match in CFN_RESOURCE_PATTERN.finditer(content)
    ])


def detect_aws_terraform(path: str, content: str) -> list[CloudServiceDetection]:
    return _terraform(path, content, TERRAFORM_AWS_PATTERN, TF_PREFIX_TO_SERVICE)


# --- Azure ---


def detect_azure_terraform(path: str, content: str) -> list[CloudServiceDetection]:
    return _terraform(path, content, TERRAFORM_AZURERM_PATTERN, TF_AZURERM_TO_SERVICE)


def _arm_service(namespace: str) -> str:
    return ARM_NAMESPACE_TO_SERVICE.get(namespace) or namespace.removeprefix("Microsoft.")


def detect_azure_arm(path: str, content: str) -> list[CloudServiceDetection]:
    """ARM template JSON: quoted ``"Microsoft.<Namespace>`` resource providers."""
    if not path.endswith(".json"):
        return []
    if "deploymentTemplate" not in content and "Microsoft." not in content:
        return []
    return _unique([
        _detection(_arm_service(match.group(1)), path, "arm-template")
        for match in ARM_NAMESPACE_PATTERN.finditer(content)
    ])


def detect_azure_bicep(path: str, content: str) -> list[CloudServiceDetection]:
    """Bicep resource declarations: ``'Microsoft.<Namespace>/...@version'``."""
    if not path.endswith(".bicep"):
        return []
    return _unique([
        _detection(_arm_service(match.group(1)), path, "bicep")
        for match in BICEP_NAMESPACE_PATTERN.finditer(content)
    ])


def detect_azure_npm(path: str, content: str) -> list[CloudServiceDetection]:
    results = []
    for dep in _npm_dependency_names(path, content):
        match = AZURE_NPM_PATTERN.match(dep)
        if match:
            results.append(_detection(title_case(match.group(1)), path, "npm-sdk", sdk_package=dep))
    return _unique(results)


def detect_azure_python(path: str, content: str) -> list[CloudServiceDetection]:
    """``azure-*`` / ``azure_*`` distributions named anywhere in a Python manifest."""
    if not _is_python_manifest(path):
        return []
    results = []
    for match in AZURE_PYTHON_PATTERN.finditer(content):
        package = match.group(0).lower()
        service = title_case(AZURE_PYTHON_PREFIX.sub("", package))
        results.append(_detection(service, path, "python-sdk", sdk_package=package))
    return _unique(results)


# --- GCP ---


def detect_gcp_terraform(path: str, content: str) -> list[CloudServiceDetection]:
    return _terraform(path, content, TERRAFORM_GOOGLE_PATTERN, TF_GOOGLE_TO_SERVICE)


def detect_gcp_npm(path: str, content: str) -> list[CloudServiceDetection]:
    results = []
    for dep in _npm_dependency_names(path, content):
        match = GCP_NPM_PATTERN.match(dep)
        if match:
            service = lookup_service(TF_GOOGLE_TO_SERVICE, match.group(1))
            results.append(_detection(service, path, "npm-sdk", sdk_package=dep))
    return _unique(results)


def detect_gcp_python(path: str, content: str) -> list[CloudServiceDetection]:
    if not _is_python_manifest(path):
        return []
    results = []
    for match in GCP_PYTHON_PATTERN.finditer(content):
        package = match.group(0).lower()
        service = title_case(package.removeprefix("google-cloud-"))
        results.append(_detection(service, path, "python-sdk", sdk_package=package))
    return _unique(results)


AWS_DETECTORS = [
    detect_aws_js_sdk_v3,
    detect_aws_js_sdk_v2,
    detect_aws_cdk,
    detect_aws_boto3,
    detect_aws_cloudformation,
    detect_aws_terraform,
]

AZURE_DETECTORS = [
    detect_azure_terraform,
    detect_azure_arm,
    detect_azure_bicep,
    detect_azure_npm,
    detect_azure_python,
]

GCP_DETECTORS = [
    detect_gcp_terraform,
    detect_gcp_npm,
    detect_gcp_python,
]
