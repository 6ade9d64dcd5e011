# sendgrid-tv: declarative SendGrid template versions
