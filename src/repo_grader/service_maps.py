"""
Static lookup tables mapping raw cloud identifiers to service names.

Keys are the raw fragments pulled out of manifests and infrastructure
code: SDK client suffixes, boto3 service ids, Terraform resource-type
prefixes and ARM namespaces. Values are the human-readable names shown
in results. Identifiers missing from a table fall back to ``title_case``.
"""

import re
from types import MappingProxyType

# @aws-sdk/client-* suffix (also used for CDK construct libraries)
CLIENT_TO_SERVICE = MappingProxyType({
    "s3": "S3",
    "dynamodb": "DynamoDB",
    "lambda": "Lambda",
    "sqs": "SQS",
    "sns": "SNS",
    "ses": "SES",
    "sesv2": "SES v2",
    "iam": "IAM",
    "sts": "STS",
    "cloudwatch": "CloudWatch",
    "cloudwatch-logs": "CloudWatch Logs",
    "cloudformation": "CloudFormation",
    "ec2": "EC2",
    "ecs": "ECS",
    "ecr": "ECR",
    "eks": "EKS",
    "rds": "RDS",
    "elasticache": "ElastiCache",
    "kinesis": "Kinesis",
    "firehose": "Firehose",
    "stepfunctions": "Step Functions",
    "sfn": "Step Functions",
    "apigateway": "API Gateway",
    "apigatewayv2": "API Gateway v2",
    "cognito-identity": "Cognito Identity",
    "cognito-identity-provider": "Cognito User Pools",
    "secrets-manager": "Secrets Manager",
    "ssm": "Systems Manager",
    "kms": "KMS",
    "route-53": "Route 53",
    "cloudfront": "CloudFront",
    "eventbridge": "EventBridge",
    "athena": "Athena",
    "glue": "Glue",
    "redshift": "Redshift",
    "elasticsearch-service": "OpenSearch",
    "opensearch": "OpenSearch",
    "auto-scaling": "Auto Scaling",
    "elb": "ELB",
    "elastic-load-balancing-v2": "ELB v2",
    "codebuild": "CodeBuild",
    "codepipeline": "CodePipeline",
    "codecommit": "CodeCommit",
    "codedeploy": "CodeDeploy",
    "textract": "Textract",
    "rekognition": "Rekognition",
    "comprehend": "Comprehend",
    "translate": "Translate",
    "polly": "Polly",
    "sagemaker": "SageMaker",
    "bedrock": "Bedrock",
    "bedrock-runtime": "Bedrock Runtime",
})

# Terraform aws_<prefix>_* resource types
TF_PREFIX_TO_SERVICE = MappingProxyType({
    "s3": "S3",
    "dynamodb": "DynamoDB",
    "lambda": "Lambda",
    "sqs": "SQS",
    "sns": "SNS",
    "ses": "SES",
    "iam": "IAM",
    "ec2": "EC2",
    "ecs": "ECS",
    "ecr": "ECR",
    "eks": "EKS",
    "rds": "RDS",
    "elasticache": "ElastiCache",
    "kinesis": "Kinesis",
    "firehose": "Firehose",
    "sfn": "Step Functions",
    "apigateway": "API Gateway",
    "apigatewayv2": "API Gateway v2",
    "cognito": "Cognito",
    "secretsmanager": "Secrets Manager",
    "ssm": "Systems Manager",
    "kms": "KMS",
    "route53": "Route 53",
    "cloudfront": "CloudFront",
    "cloudwatch": "CloudWatch",
    "cloudformation": "CloudFormation",
    "eventbridge": "EventBridge",
    "athena": "Athena",
    "glue": "Glue",
    "redshift": "Redshift",
    "opensearch": "OpenSearch",
    "elasticsearch": "OpenSearch",
    "autoscaling": "Auto Scaling",
    "lb": "ELB",
    "alb": "ALB",
    "elb": "ELB",
    "codebuild": "CodeBuild",
    "codepipeline": "CodePipeline",
    "codecommit": "CodeCommit",
    "codedeploy": "CodeDeploy",
    "sagemaker": "SageMaker",
    "bedrock": "Bedrock",
    "vpc": "VPC",
    "subnet": "VPC",
    "security": "VPC",
    "nat": "VPC",
    "internet": "VPC",
    "db": "RDS",
    "waf": "WAF",
    "acm": "ACM",
})

# boto3.client("<id>") / boto3.resource("<id>")
BOTO3_TO_SERVICE = MappingProxyType({
    "s3": "S3",
    "dynamodb": "DynamoDB",
    "lambda": "Lambda",
    "sqs": "SQS",
    "sns": "SNS",
    "ses": "SES",
    "iam": "IAM",
    "sts": "STS",
    "cloudwatch": "CloudWatch",
    "logs": "CloudWatch Logs",
    "cloudformation": "CloudFormation",
    "ec2": "EC2",
    "ecs": "ECS",
    "ecr": "ECR",
    "eks": "EKS",
    "rds": "RDS",
    "elasticache": "ElastiCache",
    "kinesis": "Kinesis",
    "firehose": "Firehose",
    "stepfunctions": "Step Functions",
    "apigateway": "API Gateway",
    "apigatewayv2": "API Gateway v2",
    "cognito-idp": "Cognito User Pools",
    "cognito-identity": "Cognito Identity",
    "secretsmanager": "Secrets Manager",
    "ssm": "Systems Manager",
    "kms": "KMS",
    "route53": "Route 53",
    "cloudfront": "CloudFront",
    "events": "EventBridge",
    "athena": "Athena",
    "glue": "Glue",
    "redshift": "Redshift",
    "sagemaker": "SageMaker",
    "bedrock-runtime": "Bedrock Runtime",
    "bedrock": "Bedrock",
    "textract": "Textract",
    "rekognition": "Rekognition",
    "comprehend": "Comprehend",
    "translate": "Translate",
    "polly": "Polly",
})

# Terraform azurerm_<prefix>_* resource types; keys may span several words
TF_AZURERM_TO_SERVICE = MappingProxyType({
    "storage": "Storage",
    "kubernetes": "AKS",
    "container": "Container Instances",
    "cosmosdb": "Cosmos DB",
    "sql": "SQL Database",
    "mysql": "MySQL",
    "postgresql": "PostgreSQL",
    "redis": "Redis Cache",
    "servicebus": "Service Bus",
    "eventhub": "Event Hubs",
    "function": "Functions",
    "app_service": "App Service",
    "linux_web": "App Service",
    "windows_web": "App Service",
    "logic_app": "Logic Apps",
    "key_vault": "Key Vault",
    "monitor": "Monitor",
    "log_analytics": "Log Analytics",
    "application_insights": "Application Insights",
    "virtual_machine": "Virtual Machines",
    "virtual_network": "Virtual Network",
    "subnet": "Virtual Network",
    "network_security": "NSG",
    "lb": "Load Balancer",
    "application_gateway": "Application Gateway",
    "frontdoor": "Front Door",
    "cdn": "CDN",
    "dns": "DNS",
    "private_dns": "Private DNS",
    "cognitive": "Cognitive Services",
    "search": "Cognitive Search",
    "synapse": "Synapse Analytics",
    "data_factory": "Data Factory",
    "databricks": "Databricks",
    "batch": "Batch",
    "notification_hub": "Notification Hubs",
    "signalr": "SignalR",
    "api_management": "API Management",
    "firewall": "Firewall",
    "bastion": "Bastion",
})

# ARM / Bicep resource provider namespaces
ARM_NAMESPACE_TO_SERVICE = MappingProxyType({
    "Microsoft.Compute": "Virtual Machines",
    "Microsoft.Storage": "Storage",
    "Microsoft.Network": "Virtual Network",
    "Microsoft.Web": "App Service",
    "Microsoft.Sql": "SQL Database",
    "Microsoft.DocumentDB": "Cosmos DB",
    "Microsoft.Cache": "Redis Cache",
    "Microsoft.ServiceBus": "Service Bus",
    "Microsoft.EventHub": "Event Hubs",
    "Microsoft.KeyVault": "Key Vault",
    "Microsoft.ContainerService": "AKS",
    "Microsoft.ContainerRegistry": "Container Registry",
    "Microsoft.ContainerInstance": "Container Instances",
    "Microsoft.CognitiveServices": "Cognitive Services",
    "Microsoft.Search": "Cognitive Search",
    "Microsoft.Insights": "Application Insights",
    "Microsoft.OperationalInsights": "Log Analytics",
    "Microsoft.Logic": "Logic Apps",
    "Microsoft.ApiManagement": "API Management",
    "Microsoft.Cdn": "CDN",
    "Microsoft.SignalRService": "SignalR",
    "Microsoft.NotificationHubs": "Notification Hubs",
    "Microsoft.Synapse": "Synapse Analytics",
    "Microsoft.DataFactory": "Data Factory",
    "Microsoft.Databricks": "Databricks",
})

# Terraform google_<prefix>_* resource types, also used for @google-cloud/* packages
TF_GOOGLE_TO_SERVICE = MappingProxyType({
    "storage": "Cloud Storage",
    "bigquery": "BigQuery",
    "compute": "Compute Engine",
    "container": "GKE",
    "cloud_run": "Cloud Run",
    "cloudfunctions": "Cloud Functions",
    "pubsub": "Pub/Sub",
    "sql": "Cloud SQL",
    "spanner": "Spanner",
    "firestore": "Firestore",
    "bigtable": "Bigtable",
    "redis": "Memorystore",
    "kms": "Cloud KMS",
    "secret_manager": "Secret Manager",
    "logging": "Cloud Logging",
    "monitoring": "Cloud Monitoring",
    "dataflow": "Dataflow",
    "dataproc": "Dataproc",
    "composer": "Cloud Composer",
    "cloudbuild": "Cloud Build",
    "artifact_registry": "Artifact Registry",
    "dns": "Cloud DNS",
    "vpc": "VPC",
    "network": "VPC",
    "service_account": "IAM",
    "project_iam": "IAM",
    "endpoints": "Cloud Endpoints",
    "app_engine": "App Engine",
    "memcache": "Memorystore",
    "filestore": "Filestore",
})

_WORD_SPLIT = re.compile(r"[-_]")


def title_case(raw: str) -> str:
    """
    Readable fallback name for an unknown identifier.

    Splits on '-' and '_' and upper-cases the first letter of each word,
    leaving the rest untouched: ``foo-bar_baz`` -> ``Foo Bar Baz``.
    """
    return " ".join(word[:1].upper() + word[1:] for word in _WORD_SPLIT.split(raw))


def lookup_service(table: MappingProxyType, raw: str) -> str:
    """Map a raw identifier through ``table``, falling back to ``title_case``."""
    return table.get(raw) or title_case(raw)


def lookup_resource_prefix(table: MappingProxyType, resource_suffix: str) -> str:
    """
    Map a Terraform resource type (provider prefix removed) to a service.

    The longest run of leading ``_``-separated words found in ``table``
    wins, so ``key_vault_secret`` resolves through ``key_vault`` and
    ``db_instance`` through ``db``. Unknown types title-case their first word.
    """
    words = resource_suffix.split("_")
    for end in range(len(words), 0, -1):
        service = table.get("_".join(words[:end]))
        if service:
            return service
    return title_case(words[0])
