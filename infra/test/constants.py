ACCOUNT = "123456789012"
CONNECTION_ARN = (
    "arn:aws:codestar-connections:eu-west-2:123456789012:connection/"
    "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
)
REPO_OWNER = "octo-org"
