"""
reference_data.py

Static reference tables for the MFA sign-in generator: job titles, the
application catalogue per risk tier, and the organisational hierarchy.
"""

JOB_TITLES = [
    'Software Engineer', 'Senior Software Engineer', 'Lead Software Engineer', 'Staff Engineer',
    'Product Manager', 'Senior Product Manager', 'Director of Product',
    'Data Analyst', 'Senior Data Analyst', 'Data Scientist', 'Senior Data Scientist',
    'DevOps Engineer', 'Senior DevOps Engineer', 'Site Reliability Engineer',
    'Security Engineer', 'Senior Security Engineer', 'Information Security Analyst',
    'Network Engineer', 'Senior Network Engineer', 'Network Administrator',
    'Systems Administrator', 'Senior Systems Administrator', 'IT Manager',
    'Database Administrator', 'Senior DBA', 'Data Engineer',
    'QA Engineer', 'Senior QA Engineer', 'Test Automation Engineer',
    'UX Designer', 'Senior UX Designer', 'UI Developer',
    'Technical Writer', 'Documentation Manager', 'Content Strategist',
    'Project Manager', 'Senior Project Manager', 'Program Manager',
    'Business Analyst', 'Senior Business Analyst', 'Business Intelligence Analyst',
    'Sales Engineer', 'Account Manager', 'Customer Success Manager',
    'HR Manager', 'HR Business Partner', 'Talent Acquisition Specialist',
    'Finance Manager', 'Financial Analyst', 'Controller',
    'Marketing Manager', 'Digital Marketing Specialist', 'Content Marketing Manager',
    'Operations Manager', 'Supply Chain Analyst', 'Procurement Specialist',
]

# Keyed by RiskTier value
APPLICATION_CATALOG = {
    'CRITICAL': [
        'Core Banking System', 'Payment Processing Gateway', 'Trading Platform',
        'Customer Database (PII)', 'Financial Reporting System', 'ERP - Finance Module',
        'Healthcare Records System', 'Identity Management', 'Privileged Access Management',
        'Active Directory Admin', 'AWS Root Account', 'Azure Tenant Admin',
        'Production Database Admin', 'Security Operations Console', 'Firewall Management',
        'Backup Admin Console', 'Certificate Authority',
    ],
    'HIGH_RISK': [
        'CRM - Salesforce', 'HR Information System', 'Payroll System',
        'Legal Document Management', 'Compliance Portal', 'Audit Management System',
        'VPN - Executive Access', 'Code Repository - GitHub Enterprise', 'CI/CD Pipeline - Production',
        'Cloud Console - AWS', 'Cloud Console - Azure', 'Cloud Console - GCP',
        'Email Admin Portal', 'Network Management', 'Endpoint Security Console',
        'Data Loss Prevention', 'SIEM Platform', 'Vulnerability Scanner',
        'Privileged Session Manager', 'Secrets Management Vault',
    ],
    'MEDIUM_RISK': [
        'Jira', 'Confluence', 'SharePoint', 'Teams', 'Slack',
        'Zoom', 'Webex', 'Okta User Portal', 'Azure AD Portal',
        'Google Workspace Admin', 'Office 365', 'OneDrive', 'Box',
        'Dropbox Business', 'ServiceNow', 'Zendesk', 'Splunk',
        'Datadog', 'New Relic', 'PagerDuty', 'Monday.com',
        'Asana', 'Trello', 'Notion', 'Miro', 'Figma',
        'Adobe Creative Cloud', 'DocuSign',
    ],
    'LOW_RISK': [
        'Employee Directory', 'Cafeteria Booking', 'Parking Management',
        'Badge Access Portal', 'Training Portal', 'Survey Tool',
        'Event Registration', 'Travel Booking', 'Expense Reports',
        'Time Tracking', 'Benefits Portal', 'Company Intranet',
        'News & Announcements', 'Social Recognition Platform', 'Wellness App',
        'Employee Store', 'IT Help Desk Portal',
    ],
}

TIER_LABELS = {
    'CRITICAL': 'Critical',
    'HIGH_RISK': 'High-Risk',
    'MEDIUM_RISK': 'Medium-Risk',
    'LOW_RISK': 'Low-Risk',
}

LEVEL_2_ORGS = ['Engineering', 'Product', 'Sales & Marketing', 'Operations', 'Finance', 'HR & Legal']

LEVEL_3_ORGS = {
    'Engineering': ['Software Development', 'Infrastructure', 'Security', 'QA & Testing', 'Data Engineering'],
    'Product': ['Product Management', 'UX/UI Design', 'Product Marketing', 'Analytics'],
    'Sales & Marketing': ['Enterprise Sales', 'SMB Sales', 'Marketing', 'Customer Success'],
    'Operations': ['IT Operations', 'Facilities', 'Supply Chain', 'Business Operations'],
    'Finance': ['Accounting', 'FP&A', 'Treasury', 'Tax & Compliance'],
    'HR & Legal': ['Human Resources', 'Recruiting', 'Legal', 'Compliance'],
}

# Departments without an entry fall back to the department name itself
LEVEL_4_ORGS = {
    'Software Development': ['Frontend', 'Backend', 'Mobile', 'Platform'],
    'Infrastructure': ['Cloud Services', 'Network', 'Systems', 'DevOps'],
    'Security': ['Application Security', 'Infrastructure Security', 'Security Operations', 'GRC'],
    'QA & Testing': ['Manual Testing', 'Automation', 'Performance Testing'],
    'Data Engineering': ['Data Platform', 'Data Analytics', 'Business Intelligence'],
    'Product Management': ['Core Product', 'Platform', 'Enterprise', 'Consumer'],
    'UX/UI Design': ['UX Research', 'Visual Design', 'Interaction Design'],
    'Enterprise Sales': ['East Region', 'West Region', 'EMEA', 'APAC'],
    'Marketing': ['Digital Marketing', 'Content Marketing', 'Events', 'Brand'],
    'IT Operations': ['End User Computing', 'IT Support', 'IT Security'],
    'Accounting': ['Accounts Payable', 'Accounts Receivable', 'General Ledger'],
    'Human Resources': ['HR Operations', 'Compensation & Benefits', 'Employee Relations'],
}

MONTH_LABELS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']
