"""Tests for cloud service detectors."""

import json

from repo_grader.cloud_detectors import (
    AWS_SDK_V2_SERVICE,
    detect_aws_boto3,
    detect_aws_cdk,
    detect_aws_cloudformation,
    detect_aws_js_sdk_v2,
    detect_aws_js_sdk_v3,
    detect_aws_terraform,
    detect_azure_arm,
    detect_azure_bicep,
    detect_azure_npm,
    detect_azure_python,
    detect_azure_terraform,
    detect_gcp_npm,
    detect_gcp_python,
    detect_gcp_terraform,
)
from repo_grader.service_maps import TF_AZURERM_TO_SERVICE, lookup_resource_prefix, title_case


def package_json(**deps: str) -> str:
    return json.dumps({"name": "app", "dependencies": deps})


class TestServiceMaps:
    """Tests for lookup helpers."""

    def test_title_case(self):
        """Test the fallback name for unknown identifiers."""
        assert title_case("foo-bar_baz") == "Foo Bar Baz"
        assert title_case("x") == "X"

    def test_multi_word_terraform_prefix(self):
        """Test that the longest known word prefix wins."""
        assert lookup_resource_prefix(TF_AZURERM_TO_SERVICE, "key_vault_secret") == "Key Vault"

    def test_unknown_terraform_prefix(self):
        """Test fallback to the first word."""
        assert lookup_resource_prefix(TF_AZURERM_TO_SERVICE, "widget_thing") == "Widget"


class TestAwsDetectors:
    """Tests for AWS detectors."""

    def test_js_sdk_v3(self):
        """Test modular client packages."""
        content = package_json(**{"@aws-sdk/client-s3": "^3.0.0", "@aws-sdk/client-dynamodb": "^3.0.0"})
        results = detect_aws_js_sdk_v3("package.json", content)
        assert {d.service for d in results} == {"S3", "DynamoDB"}
        assert all(d.via == "js-sdk-v3" for d in results)
        assert {d.sdk_package for d in results} == {"@aws-sdk/client-s3", "@aws-sdk/client-dynamodb"}

    def test_js_sdk_v3_unknown_client_title_cased(self):
        """Test the fallback for unmapped clients."""
        results = detect_aws_js_sdk_v3("package.json", package_json(**{"@aws-sdk/client-foo-bar": "1"}))
        assert results[0].service == "Foo Bar"

    def test_js_sdk_v2(self):
        """Test the monolithic SDK."""
        results = detect_aws_js_sdk_v2("package.json", package_json(**{"aws-sdk": "^2.0.0"}))
        assert len(results) == 1
        assert results[0].service == AWS_SDK_V2_SERVICE

    def test_cdk(self):
        """Test CDK construct libraries."""
        results = detect_aws_cdk("package.json", package_json(**{"@aws-cdk/aws-lambda": "1"}))
        assert [(d.service, d.via) for d in results] == [("Lambda", "cdk")]

    def test_malformed_package_json_yields_nothing(self):
        """Test parse-or-skip."""
        assert detect_aws_js_sdk_v3("package.json", "{not json") == []
        assert detect_aws_js_sdk_v3("package.json", "[]") == []

    def test_only_package_json(self):
        """Test that other files are ignored."""
        assert detect_aws_js_sdk_v3("other.json", package_json(**{"@aws-sdk/client-s3": "1"})) == []

    def test_boto3(self):
        """Test in-code client construction."""
        content = "import boto3\ns3 = boto3.client('s3')\ntable = session.resource(\"dynamodb\")\n"
        results = detect_aws_boto3("app/handler.py", content)
        assert [(d.service, d.sdk_package) for d in results] == [
            ("S3", "boto3:s3"),
            ("DynamoDB", "boto3:dynamodb"),
        ]

    def test_boto3_repeated_client_reported_once(self):
        """Test per-file deduplication."""
        content = "boto3.client('s3')\nboto3.client('s3')\n"
        assert len(detect_aws_boto3("a.py", content)) == 1

    def test_boto3_ignores_non_python(self):
        """Test that only .py files are scanned."""
        assert detect_aws_boto3("a.js", "boto3.client('s3')") == []

    def test_cloudformation(self):
        """Test resource type extraction keeps the raw service segment."""
        content = "Resources:\n  Bucket:\n    Type: AWS::S3::Bucket\n  Fn:\n    Type: AWS::Lambda::Function\n"
        results = detect_aws_cloudformation("template.yaml", content)
        assert [d.service for d in results] == ["S3", "Lambda"]

    def test_terraform(self):
        """Test resource and data blocks."""
        content = 'resource "aws_s3_bucket" "b" {}\ndata "aws_db_instance" "d" {}\n'
        results = detect_aws_terraform("main.tf", content)
        assert [d.service for d in results] == ["S3", "RDS"]
        assert all(d.via == "terraform" for d in results)

    def test_no_state_leaks_between_files(self):
        """Test that scanning one file does not affect the next."""
        first = 'resource "aws_s3_bucket" "a" {}\nresource "aws_lambda_function" "b" {}\n'
        second = 'resource "aws_s3_bucket" "c" {}\n'
        detect_aws_terraform("a.tf", first)
        again = detect_aws_terraform("b.tf", second)
        assert [d.service for d in again] == ["S3"]
        assert detect_aws_terraform("a.tf", first) == detect_aws_terraform("a.tf", first)


class TestAzureDetectors:
    """Tests for Azure detectors."""

    def test_terraform(self):
        """Test azurerm resources."""
        content = 'resource "azurerm_storage_account" "s" {}\nresource "azurerm_key_vault_secret" "k" {}\n'
        services = [d.service for d in detect_azure_terraform("infra/main.tf", content)]
        assert services == ["Storage", "Key Vault"]

    def test_arm(self):
        """Test ARM namespaces."""
        content = '{"$schema": "deploymentTemplate", "resources": [{"type": "Microsoft.Storage/storageAccounts"}]}'
        results = detect_azure_arm("azuredeploy.json", content)
        assert [(d.service, d.via) for d in results] == [("Storage", "arm-template")]

    def test_arm_requires_marker(self):
        """Test that JSON without ARM markers is skipped."""
        assert detect_azure_arm("azuredeploy.json", '{"a": 1}') == []

    def test_bicep(self):
        """Test Bicep resource declarations."""
        content = "resource site 'Microsoft.Web/sites@2022-03-01' = {}\n"
        assert [d.service for d in detect_azure_bicep("main.bicep", content)] == ["App Service"]

    def test_npm(self):
        """Test @azure packages."""
        results = detect_azure_npm("package.json", package_json(**{"@azure/storage-blob": "12"}))
        assert [(d.service, d.via) for d in results] == [("Storage Blob", "npm-sdk")]

    def test_python(self):
        """Test azure-* distributions in requirements."""
        results = detect_azure_python("requirements.txt", "azure-storage-blob==12.0\nflask\n")
        assert [(d.service, d.sdk_package) for d in results] == [("Storage Blob", "azure-storage-blob")]


class TestGcpDetectors:
    """Tests for GCP detectors."""

    def test_terraform(self):
        """Test google resources."""
        content = 'resource "google_storage_bucket" "b" {}\nresource "google_pubsub_topic" "t" {}\n'
        assert [d.service for d in detect_gcp_terraform("main.tf", content)] == ["Cloud Storage", "Pub/Sub"]

    def test_npm(self):
        """Test @google-cloud packages."""
        results = detect_gcp_npm("package.json", package_json(**{"@google-cloud/pubsub": "3"}))
        assert [d.service for d in results] == ["Pub/Sub"]

    def test_python(self):
        """Test google-cloud-* distributions."""
        results = detect_gcp_python("pyproject.toml", 'dependencies = ["google-cloud-storage>=2"]')
        assert [(d.service, d.via) for d in results] == [("Storage", "python-sdk")]
