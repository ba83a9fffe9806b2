"""Seed postings shown when neither the backend nor the cache has anything."""

from datetime import datetime, timedelta
from typing import List, Optional

from .models import JobPosting, LocalId
from .normalize import company_logo, format_salary, posted_time

# (title, company, experience, location, salary LPA, job type, hours ago, liked, likes, description)
_SEED = [
    ("Senior Full Stack Developer", "Google", "3-5 yr Exp", "Bangalore", 25, "full-time", 2, False, 24,
     "Join our core platform team to build scalable web applications using React, Node.js, and cloud technologies."),
    ("React Native Developer", "Meta", "2-4 yr Exp", "Hyderabad", 22, "full-time", 5, False, 18,
     "Build mobile applications for iOS and Android using React Native."),
    ("DevOps Engineer", "Amazon", "2-4 yr Exp", "Mumbai", 20, "full-time", 8, True, 32,
     "Manage cloud infrastructure on AWS, implement CI/CD pipelines, and ensure high availability of services."),
    ("Data Scientist", "Microsoft", "1-3 yr Exp", "Pune", 18, "full-time", 12, False, 15,
     "Analyze large datasets, build predictive models, and derive insights to drive business decisions."),
    ("Frontend Developer", "Flipkart", "1-2 yr Exp", "Bangalore", 15, "full-time", 24, False, 27,
     "Create responsive and user-friendly interfaces using React.js, TypeScript, and modern CSS frameworks."),
    ("Senior UX/UI Designer", "Adobe", "4-6 yr Exp", "Remote", 28, "full-time", 6, False, 0,
     "Lead design initiatives for creative software products."),
    ("Product Designer", "Swiggy", "2-4 yr Exp", "Bangalore", 16, "full-time", 10, False, 0,
     "Design end-to-end user experiences for a food delivery platform."),
    ("Graphic Designer", "Zomato", "1-3 yr Exp", "Delhi", 12, "contract", 48, False, 0,
     "Create visual content for marketing campaigns, social media, and brand communications."),
    ("Digital Marketing Manager", "Paytm", "3-5 yr Exp", "Noida", 14, "full-time", 4, False, 0,
     "Lead digital marketing strategies and manage campaigns across multiple channels."),
    ("Business Analyst", "Infosys", "2-4 yr Exp", "Chennai", 13, "full-time", 7, False, 0,
     "Analyze business processes, gather requirements, and work with stakeholders on technology solutions."),
    ("Sales Development Representative", "HubSpot", "0-2 yr Exp", "Remote", 8, "full-time", 3, False, 0,
     "Generate leads, qualify prospects, and support the sales team."),
    ("Customer Success Manager", "Salesforce", "2-4 yr Exp", "Hyderabad", 17, "full-time", 9, False, 0,
     "Ensure customer satisfaction and retention for enterprise clients."),
    ("Financial Analyst", "Goldman Sachs", "1-3 yr Exp", "Mumbai", 19, "full-time", 11, False, 0,
     "Perform financial modeling, analysis, and reporting with investment teams."),
    ("Operations Manager", "Uber", "3-5 yr Exp", "Bangalore", 21, "full-time", 24, False, 0,
     "Oversee daily operations, optimize processes, and manage cross-functional teams."),
    ("Software Engineer Intern", "Tesla", "0-1 yr Exp", "Pune", 6, "internship", 6, False, 0,
     "6-month internship working on autonomous driving software and electric vehicle systems."),
    ("Content Writer", "Byju's", "1-2 yr Exp", "Remote", 7, "part-time", 15, False, 0,
     "Create educational content, blog posts, and marketing materials."),
    ("Cloud Solutions Architect", "IBM", "5-8 yr Exp", "Hybrid", 35, "full-time", 13, False, 0,
     "Design and implement cloud infrastructure solutions for enterprise clients."),
    ("Cybersecurity Specialist", "TCS", "2-5 yr Exp", "Remote", 16, "full-time", 18, False, 0,
     "Implement security measures, conduct vulnerability assessments, and respond to incidents."),
]


def sample_jobs(now: Optional[datetime] = None) -> List[JobPosting]:
    now = now or datetime.now()
    jobs = []
    for i, (title, company, exp, loc, lpa, jtype, hours, liked, likes, desc) in enumerate(_SEED, 1):
        created = now - timedelta(hours=hours)
        jobs.append(
            JobPosting(
                id=LocalId(i),
                title=title,
                company=company,
                description=desc,
                location=loc,
                experience=exp,
                job_type=jtype,
                salary=format_salary(lpa),
                salary_value=float(lpa),
                status="published",
                posted_time=posted_time(created, now),
                created_at=created,
                logo=company_logo(company),
                is_liked=liked,
                likes_count=likes,
            )
        )
    return jobs
